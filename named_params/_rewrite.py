"""Rewrite passes over scanned Go source.

Definitions ``func f(a, b: int, c: string)`` become ``func f_a_b_c(a int, b int, c string)``
and calls ``f(a: 1, b: 2, c: "x")`` become ``f_a_b_c(1, 2, "x")``.
"""

from __future__ import annotations
import functools
import logging
import re
from dataclasses import dataclass, field

from named_params._scanner import (
    CLOSE_END, CLOSE_START, COMMENT_RE, OPEN_END, OPEN_START, untag,
)

log = logging.getLogger(__name__)

DEFINITION = "definition"
INVOCATION = "invocation"

DIRECTIVE_PREFIXES = ("//go:generate", "// +build")
NEUTRAL_DIRECTIVE = "//"

# Never mangled, even when followed by something that looks like a named call.
GO_KEYWORDS = frozenset({
    'break', 'case', 'chan', 'const', 'continue', 'default', 'defer', 'else',
    'fallthrough', 'for', 'func', 'go', 'goto', 'if', 'import', 'interface',
    'map', 'package', 'range', 'return', 'select', 'struct', 'switch', 'type',
    'var',
})

IDENT = r'[A-Za-z_][A-Za-z0-9_]*'
# Whitespace and comment placeholders.
TRIVIA = r'(?:\s|' + COMMENT_RE.pattern + r')*'

_O, _OE, _C, _CE = (re.escape(m) for m in (OPEN_START, OPEN_END, CLOSE_START, CLOSE_END))
_NO_TAGS = '[^' + _O + _OE + _C + _CE + ']*'


# ---------------------------------------------------------------------------
# Parameter lists
# ---------------------------------------------------------------------------

@dataclass
class Parameter:
    name: str
    detail: str
    # Newlines and comments dropped together with the "name:" delimiter.
    leading: str = ''


@dataclass
class ParameterList:
    params: list = field(default_factory=list)
    # Newlines and comments between the last parameter and the closing bracket.
    trailing: str = ''

    def __len__(self):
        return len(self.params)

    def __iter__(self):
        return iter(self.params)

    def __getitem__(self, index):
        return self.params[index]

    @property
    def names(self) -> list:
        return [p.name for p in self.params]

    @property
    def details(self) -> list:
        return [p.detail for p in self.params]


def mangle(base: str, names) -> str:
    """f + [a, b] -> f_a_b"""
    return base + ''.join('_' + name for name in names)


_MARKER = re.compile(r'(?P<trivia>' + TRIVIA + r')(?P<name>' + IDENT + r')\s*:(?!=)(?P<rest>.*)',
                     re.DOTALL)
_BARE_NAME = re.compile(r'(?P<trivia>' + TRIVIA + r')(?P<name>' + IDENT + r')\s*')
_ONLY_TRIVIA = re.compile(TRIVIA)
_TAIL = re.compile(r'(?P<body>.*?)(?P<tail>' + TRIVIA + r')', re.DOTALL)
_TRIVIA_TOKEN = re.compile(COMMENT_RE.pattern + r'|\r?\n')


def split_top_level(text: str) -> list:
    """Split on commas that are not nested in (), [] or {}."""
    pieces = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch in '([{':
            depth += 1
        elif ch in ')]}':
            depth -= 1
        elif ch == ',' and depth == 0:
            pieces.append(text[start:i])
            start = i + 1
    pieces.append(text[start:])
    return pieces


def render_trivia(text: str) -> str:
    """Keep only the newlines and comments of a discarded piece of text."""
    out = []
    for m in _TRIVIA_TOKEN.finditer(text):
        tok = m.group(0)
        out.append(tok if tok.endswith('\n') else ' ' + tok)
    return ''.join(out)


def _value(m) -> tuple:
    """Split the text after a "name:" marker into (trivia, value)."""
    rest = m.group('rest')
    lead = _ONLY_TRIVIA.match(rest).end()
    return render_trivia(rest[:lead]), rest[lead:]


def parse_parameters(text: str, mode: str = INVOCATION) -> ParameterList:
    """Parse the text between a pair of brackets into an ordered ParameterList.

    An empty list means the text is not a named-parameter list and must be
    left alone.
    """
    pieces = split_top_level(text)
    trailing = ''
    # A trailing comma leaves a last piece with nothing but whitespace or comments.
    if len(pieces) > 1 and _ONLY_TRIVIA.fullmatch(pieces[-1]):
        trailing = pieces.pop()

    if mode == DEFINITION:
        params = _definition_parameters(pieces)
    elif mode == INVOCATION:
        params = _invocation_parameters(pieces)
    else:
        raise ValueError(f"unknown parameter list mode: {mode!r}")

    if not params:
        return ParameterList()

    # Whatever follows the last detail before the bracket belongs to the list.
    last = params[-1].detail
    tail = _TAIL.fullmatch(last)
    for p in params:
        # grouped names share the last type
        p.detail = tail.group('body').strip() if p.detail == last else p.detail.strip()
    trailing = render_trivia(tail.group('tail') + trailing)
    return ParameterList(params, trailing)


def _invocation_parameters(pieces: list) -> list:
    params = []
    for piece in pieces:
        m = _MARKER.fullmatch(piece)
        if m:
            after, value = _value(m)
            params.append(Parameter(m.group('name'), value,
                                    render_trivia(m.group('trivia')) + after))
        elif params:
            # not a delimiter; the comma belongs to the previous expression
            params[-1].detail += ',' + piece
        else:
            return []
    return params


def _definition_parameters(pieces: list) -> list:
    params = []
    pending = []
    for piece in pieces:
        m = _MARKER.fullmatch(piece)
        if m:
            after, detail = _value(m)
            pending.append((m.group('name'), render_trivia(m.group('trivia')) + after))
            for name, leading in pending:
                params.append(Parameter(name, detail, leading))
            pending = []
            continue
        m = _BARE_NAME.fullmatch(piece)
        if not m:
            return []
        pending.append((m.group('name'), render_trivia(m.group('trivia'))))
    if pending:
        # names without a type: an ordinary "a, b int" list
        return []
    return params


def join_parameters(parts, params: ParameterList) -> str:
    """Join rendered parameters, putting dropped newlines and comments back."""
    out = []
    for i, (part, param) in enumerate(zip(parts, params)):
        leading = param.leading
        if i > 0:
            out.append(',')
            leading = leading or ' '
        else:
            leading = leading.lstrip(' ')
        if leading and not leading.endswith((' ', '\n')):
            leading += ' '
        out.append(leading + part)
    if params.trailing:
        # Go inserts a semicolon at a line end after an operand, so keep the comma
        if '\n' in params.trailing:
            out.append(',')
        out.append(params.trailing)
    return ''.join(out)


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def normalize_directives(text: str, prefixes=DIRECTIVE_PREFIXES) -> str:
    """Blank out build/generate directive lines without removing them."""
    prefixes = tuple(prefixes)
    if not prefixes:
        return text
    lines = text.split('\n')
    for i, line in enumerate(lines):
        if line.startswith(prefixes):
            lines[i] = NEUTRAL_DIRECTIVE + ('\r' if line.endswith('\r') else '')
    return '\n'.join(lines)


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

_DEFINITION = re.compile(
    r'\bfunc(?P<gap>\s+)'
    r'(?P<receiver>' + _O + r'(?P<rdepth>\d+)' + _OE + _NO_TAGS + _C + r'(?P=rdepth)' + _CE + r'\s*)?'
    r'(?P<name>' + IDENT + r')(?P<space>[ \t]*)'
    + _O + r'(?P<depth>\d+)' + _OE + r'(?P<params>.*?)' + _C + r'(?P=depth)' + _CE,
    re.DOTALL,
)


def rewrite_definitions(tagged: str) -> str:
    """Rewrite named-parameter function and method definitions to positional form."""
    count = 0

    def replace(m):
        nonlocal count
        params = parse_parameters(untag(m.group('params')), DEFINITION)
        if not params:
            return m.group(0)
        count += 1
        receiver = untag(m.group('receiver') or '')
        name = mangle(m.group('name'), params.names)
        parts = [f"{p.name} {p.detail}" for p in params]
        return f"func{m.group('gap')}{receiver}{name}{m.group('space')}({join_parameters(parts, params)})"

    result = _DEFINITION.sub(replace, tagged)
    log.debug("rewrote %d definitions", count)
    return result


# ---------------------------------------------------------------------------
# Invocations
# ---------------------------------------------------------------------------

_NOT_A_NAME = (']', ')', CLOSE_END)


@functools.lru_cache(maxsize=None)
def invocation_pattern(depth: int):
    """<ident?><open depth><interior><close depth>; deeper levels are gone by then."""
    return re.compile(r'([A-Za-z0-9_]*)' + _O + str(depth) + _OE
                      + '(' + _NO_TAGS + ')' + _C + str(depth) + _CE)


def rewrite_invocations(tagged: str, max_depth: int) -> str:
    """Rewrite named calls, innermost nesting level first.

    Each pass turns every span of one depth into plain text, so by the time
    a level is examined its arguments hold no tags and no named calls.
    """
    count = 0

    def replace(m):
        nonlocal count
        name, interior = m.groups()
        if name in GO_KEYWORDS:
            return f"{name}({interior})"
        if not name and m.string[m.start() - 1:m.start()] in _NOT_A_NAME:
            # Map[int](...), fs[0](...), f()(...): the callee has no name to mangle
            return f"({interior})"
        params = parse_parameters(interior, INVOCATION)
        if not params:
            return f"{name}({interior})"
        count += 1
        return f"{mangle(name, params.names)}({join_parameters(params.details, params)})"

    for depth in range(max_depth, -1, -1):
        tagged = invocation_pattern(depth).sub(replace, tagged)
    log.debug("rewrote %d invocations over %d levels", count, max_depth)
    return tagged
