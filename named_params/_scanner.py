"""Literal-aware scanner.

Replaces every structural parenthesis with a depth tag and moves comments
and string/char literals out of the way, so the rewrite passes can work on
the text with flat regular expressions.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field


log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

# Private-use code points; they never appear in structural Go source.
OPEN_START, OPEN_END = '\ue000', '\ue001'
CLOSE_START, CLOSE_END = '\ue002', '\ue003'
LITERAL_START, LITERAL_END = '\ue004', '\ue005'
COMMENT_START, COMMENT_END = '\ue006', '\ue007'
RESERVED = frozenset(OPEN_START + OPEN_END + CLOSE_START + CLOSE_END
                     + LITERAL_START + LITERAL_END + COMMENT_START + COMMENT_END)

TAG_RE = re.compile('[\ue000\ue002](\\d+)[\ue001\ue003]')
PLACEHOLDER_RE = re.compile('[\ue004\ue006](\\d+)[\ue005\ue007]')
COMMENT_RE = re.compile('\ue006\\d+\ue007')


def open_tag(depth: int) -> str:
    return f"{OPEN_START}{depth}{OPEN_END}"


def close_tag(depth: int) -> str:
    return f"{CLOSE_START}{depth}{CLOSE_END}"


def untag(text: str) -> str:
    """Turn depth tags back into plain parentheses."""
    return TAG_RE.sub(lambda m: '(' if m.group(0)[0] == OPEN_START else ')', text)


def restore_literals(text: str, literals: list) -> str:
    """Put the comments and literals taken out by the scanner back in place."""
    return PLACEHOLDER_RE.sub(lambda m: literals[int(m.group(1))], text)


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class ScanError(Exception):
    """Structural problem found while scanning."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


@dataclass
class ScanResult:
    text: str
    max_depth: int
    literals: list = field(default_factory=list)


def scan(source: str) -> ScanResult:
    """Tag the parentheses of *source* by depth; literals become placeholders."""
    result = Scanner(source).scan()
    log.debug("scanned %d chars: max depth %d, %d literals",
              len(source), result.max_depth, len(result.literals))
    return result


class Scanner:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.out = []
        self.literals = []
        self.depth = 0
        self.max_depth = 0
        # Positions of the currently open parentheses, for error reporting.
        self.opened = []

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, n: int = 1) -> str:
        return self.text[self.pos:self.pos + n]

    def advance(self) -> str:
        ch = self.text[self.pos]
        self.pos += 1
        return ch

    def location(self, pos: int) -> tuple:
        line = self.text.count('\n', 0, pos) + 1
        column = pos - (self.text.rfind('\n', 0, pos) + 1) + 1
        return line, column

    def error(self, message: str, pos: int):
        line, column = self.location(pos)
        return ScanError(message, line, column)

    def scan(self) -> ScanResult:
        while not self.at_end():
            ch = self.peek()
            if self.peek(2) == '//':
                self.line_comment()
            elif self.peek(2) == '/*':
                self.block_comment()
            elif ch in '"\'':
                self.quoted(ch)
            elif ch == '`':
                self.raw_string()
            elif ch == '(':
                self.advance()
                self.opened.append(self.pos - 1)
                self.out.append(open_tag(self.depth))
                self.depth += 1
                if self.depth > self.max_depth:
                    self.max_depth = self.depth
            elif ch == ')':
                if self.depth == 0:
                    raise self.error("unbalanced parentheses: unexpected ')'", self.pos)
                self.advance()
                self.opened.pop()
                self.depth -= 1
                self.out.append(close_tag(self.depth))
            elif ch in RESERVED:
                raise self.error(f"reserved character U+{ord(ch):04X} in source", self.pos)
            else:
                self.out.append(self.advance())

        if self.depth > 0:
            raise self.error("unbalanced parentheses: '(' is never closed", self.opened[-1])

        return ScanResult(''.join(self.out), self.max_depth, self.literals)

    def opaque(self, start: int, comment: bool = False):
        """Move text[start:pos] into the literal table."""
        if comment:
            self.out.append(f"{COMMENT_START}{len(self.literals)}{COMMENT_END}")
        else:
            self.out.append(f"{LITERAL_START}{len(self.literals)}{LITERAL_END}")
        self.literals.append(self.text[start:self.pos])

    def line_comment(self):
        start = self.pos
        end = self.text.find('\n', self.pos)
        # the newline stays structural so the line is still visible to the passes
        self.pos = len(self.text) if end < 0 else end
        self.opaque(start, comment=True)

    def block_comment(self):
        start = self.pos
        end = self.text.find('*/', self.pos + 2)
        if end < 0:
            raise self.error("unterminated block comment", start)
        self.pos = end + 2
        self.opaque(start, comment=True)

    def quoted(self, quote: str):
        start = self.pos
        self.advance()  # opening quote
        while not self.at_end():
            ch = self.advance()
            if ch == '\\':
                if self.at_end():
                    break
                self.advance()
            elif ch == quote:
                self.opaque(start)
                return
            elif ch == '\n':
                break
        kind = "string" if quote == '"' else "character"
        raise self.error(f"unterminated {kind} literal", start)

    def raw_string(self):
        start = self.pos
        end = self.text.find('`', self.pos + 1)
        if end < 0:
            raise self.error("unterminated raw string literal", start)
        self.pos = end + 1
        self.opaque(start)
