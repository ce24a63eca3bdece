"""go-named-params: named parameters for Go, compiled away into positional calls."""

import os

from named_params._rewrite import (
    DIRECTIVE_PREFIXES, Parameter, ParameterList, mangle, normalize_directives,
    parse_parameters, rewrite_definitions, rewrite_invocations,
)
from named_params._scanner import ScanError, ScanResult, restore_literals, scan

OUTPUT_SUFFIX = ".go"


class NamedParamsError(Exception):
    """Base exception for named-parameter compilation errors."""
    pass


class NamedParamsSyntaxError(NamedParamsError):
    """Raised when the source has unbalanced brackets or an unterminated literal."""

    def __init__(self, message: str, line: int = None, column: int = None):
        self.message = message
        self.line = line
        self.column = column
        if line is not None:
            message = f"line {line}, column {column}: {message}"
        super().__init__(message)


class Compiler:
    """Rewrites Go source using named parameters into plain Go.

    Usage:
        c = Compiler()
        c.compile("x := add(a: 1, b: 2)")   # 'x := add_a_b(1, 2)'
        c.convert("main.ngo")               # writes main.ngo.go
    """

    def __init__(self, directive_prefixes=DIRECTIVE_PREFIXES, suffix: str = OUTPUT_SUFFIX):
        self.directive_prefixes = tuple(directive_prefixes)
        self.suffix = suffix

    def compile(self, source: str) -> str:
        """Compile source text and return the rewritten text."""
        text = normalize_directives(source, self.directive_prefixes)
        try:
            scanned = scan(text)
        except ScanError as e:
            raise NamedParamsSyntaxError(e.message, e.line, e.column) from None
        text = rewrite_definitions(scanned.text)
        text = rewrite_invocations(text, scanned.max_depth)
        return restore_literals(text, scanned.literals)

    def compile_file(self, path) -> str:
        """Read and compile a source file. OSError propagates for unreadable input."""
        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                source = f.read()
        except UnicodeDecodeError as e:
            raise NamedParamsError(f"not valid UTF-8: byte 0x{e.object[e.start]:02x} "
                                   f"at offset {e.start}") from None
        return self.compile(source)

    def output_path(self, path) -> str:
        return os.fspath(path) + self.suffix

    def convert(self, path, output=None) -> str:
        """Compile *path* and write the result; returns the output path.

        Nothing is written unless compilation succeeds.
        """
        result = self.compile_file(path)
        output = os.fspath(output) if output else self.output_path(path)
        with open(output, 'w', encoding='utf-8', newline='') as f:
            f.write(result)
        return output


_default = Compiler()


def compile_source(source: str) -> str:
    """Compile source text with the default settings."""
    return _default.compile(source)


def compile_file(path) -> str:
    return _default.compile_file(path)


__all__ = [
    'Compiler', 'compile_source', 'compile_file',
    'NamedParamsError', 'NamedParamsSyntaxError',
    'Parameter', 'ParameterList', 'ScanResult',
    'mangle', 'parse_parameters', 'scan',
    'normalize_directives', 'rewrite_definitions', 'rewrite_invocations',
    'DIRECTIVE_PREFIXES', 'OUTPUT_SUFFIX',
]
