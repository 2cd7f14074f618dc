"""Lexer for Go template syntax.

The lexer is a small state machine: each state function consumes input and
returns the next state. Items are collected eagerly into a list; a lexing
error becomes an ``ERROR`` item and stops the scan, so the parser reports it
only when it reaches that point of the input (an earlier parse error wins).

Whitespace trimming is applied here: ``{{- `` drops trailing whitespace from
the preceding text and `` -}}`` drops leading whitespace from the following
text, so no trim marker survives into the parse tree.
"""
from __future__ import annotations

import bisect
import enum
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from itpl.core.utils.text import go_quote

LEFT_DELIM = "{{"
RIGHT_DELIM = "}}"
LEFT_COMMENT = "/*"
RIGHT_COMMENT = "*/"
TRIM_MARKER_LEN = 2
SPACE_CHARS = " \t\r\n"

EOF = ""


class ItemType(enum.Enum):
    ERROR = "error"
    BOOL = "bool"
    CHAR = "char"
    CHAR_CONSTANT = "char constant"
    COMMENT = "comment"
    COMPLEX = "complex"
    ASSIGN = "="
    DECLARE = ":="
    EOF = "EOF"
    FIELD = "field"
    IDENTIFIER = "identifier"
    LEFT_DELIM = "left delim"
    LEFT_PAREN = "("
    NUMBER = "number"
    PIPE = "|"
    RAW_STRING = "raw string"
    RIGHT_DELIM = "right delim"
    RIGHT_PAREN = ")"
    SPACE = "space"
    STRING = "string"
    TEXT = "text"
    VARIABLE = "variable"
    # Keywords
    BLOCK = "block"
    BREAK = "break"
    CONTINUE = "continue"
    DOT = "."
    DEFINE = "define"
    ELSE = "else"
    END = "end"
    IF = "if"
    NIL = "nil"
    RANGE = "range"
    TEMPLATE = "template"
    WITH = "with"

    @property
    def is_keyword(self) -> bool:
        return self in _KEYWORD_TYPES


_KEYWORD_TYPES = frozenset(
    {
        ItemType.BLOCK,
        ItemType.BREAK,
        ItemType.CONTINUE,
        ItemType.DOT,
        ItemType.DEFINE,
        ItemType.ELSE,
        ItemType.END,
        ItemType.IF,
        ItemType.NIL,
        ItemType.RANGE,
        ItemType.TEMPLATE,
        ItemType.WITH,
    }
)

KEYWORDS = {item.value: item for item in _KEYWORD_TYPES}


@dataclass(frozen=True)
class Item:
    """A token: its type, starting offset, literal value and line number."""

    typ: ItemType
    pos: int
    val: str
    line: int

    def __str__(self) -> str:
        if self.typ is ItemType.EOF:
            return "EOF"
        if self.typ is ItemType.ERROR:
            return self.val
        if self.typ.is_keyword:
            return f"<{self.val}>"
        if len(self.val) > 10:
            return go_quote(self.val[:10]) + "..."
        return go_quote(self.val)


StateFn = Callable[["Lexer"], Optional["StateFn"]]


def is_space(ch: str) -> bool:
    return ch != EOF and ch in SPACE_CHARS


def is_alphanumeric(ch: str) -> bool:
    return ch == "_" or ch.isalpha() or ch.isdecimal()


def has_left_trim_marker(s: str) -> bool:
    return len(s) >= 2 and s[0] == "-" and is_space(s[1])


def has_right_trim_marker(s: str) -> bool:
    return len(s) >= 2 and is_space(s[0]) and s[1] == "-"


def right_trim_length(s: str) -> int:
    return len(s) - len(s.rstrip(SPACE_CHARS))


def left_trim_length(s: str) -> int:
    return len(s) - len(s.lstrip(SPACE_CHARS))


def _describe_rune(ch: str) -> str:
    # Go's %#U verb: U+0023 '#'
    return f"U+{ord(ch):04X} '{ch}'" if ch.isprintable() else f"U+{ord(ch):04X}"


class Lexer:
    """Scan template text into a list of :class:`Item`."""

    def __init__(self, text: str, *, emit_comments: bool = False, break_ok: bool = True, continue_ok: bool = True) -> None:
        self.input = text
        self.emit_comments = emit_comments
        self.break_ok = break_ok
        self.continue_ok = continue_ok
        self.items: List[Item] = []
        self.pos = 0
        self.start = 0
        self.at_eof = False
        self.paren_depth = 0
        self.inside_action = False
        self._newlines = [i for i, ch in enumerate(text) if ch == "\n"]

    # -- scanning primitives -------------------------------------------------

    def line_at(self, pos: int) -> int:
        """Return the 1-based line number of offset ``pos``."""
        return bisect.bisect_left(self._newlines, pos) + 1

    def next(self) -> str:
        if self.pos >= len(self.input):
            self.at_eof = True
            return EOF
        ch = self.input[self.pos]
        self.pos += 1
        return ch

    def peek(self) -> str:
        ch = self.next()
        self.backup()
        return ch

    def backup(self) -> None:
        if self.at_eof:
            self.at_eof = False
            return
        if self.pos > 0:
            self.pos -= 1

    def rest(self, offset: int = 0) -> str:
        return self.input[self.pos + offset :]

    def this_item(self, typ: ItemType) -> Item:
        item = Item(typ, self.start, self.input[self.start : self.pos], self.line_at(self.start))
        self.start = self.pos
        return item

    def emit(self, typ: ItemType) -> Optional[StateFn]:
        return self.emit_item(self.this_item(typ))

    def emit_item(self, item: Item) -> Optional[StateFn]:
        self.items.append(item)
        return lex_inside_action if self.inside_action else lex_text

    def ignore(self) -> None:
        self.start = self.pos

    def accept(self, valid: str) -> bool:
        ch = self.next()
        if ch != EOF and ch in valid:
            return True
        self.backup()
        return False

    def accept_run(self, valid: str) -> None:
        while True:
            ch = self.next()
            if ch == EOF or ch not in valid:
                break
        self.backup()

    def errorf(self, message: str) -> None:
        self.items.append(Item(ItemType.ERROR, self.start, message, self.line_at(self.start)))
        return None

    def at_terminator(self) -> bool:
        ch = self.peek()
        if is_space(ch):
            return True
        if ch in (EOF, ".", ",", "|", ":", ")", "("):
            return True
        return self.rest().startswith(RIGHT_DELIM)

    def at_right_delim(self) -> Tuple[bool, bool]:
        """Report whether a right delimiter starts here, and whether it carries a trim marker."""
        if has_right_trim_marker(self.rest()) and self.rest(TRIM_MARKER_LEN).startswith(RIGHT_DELIM):
            return True, True
        if self.rest().startswith(RIGHT_DELIM):
            return True, False
        return False, False

    # -- driver --------------------------------------------------------------

    def run(self) -> List[Item]:
        state: Optional[StateFn] = lex_text
        while state is not None:
            state = state(self)
        return self.items


def lex_text(lx: Lexer) -> Optional[StateFn]:
    x = lx.input.find(LEFT_DELIM, lx.pos)
    if x >= 0:
        if x > lx.pos:
            lx.pos = x
            trim_length = 0
            if has_left_trim_marker(lx.rest(len(LEFT_DELIM))):
                trim_length = right_trim_length(lx.input[lx.start : lx.pos])
            lx.pos -= trim_length
            item = lx.this_item(ItemType.TEXT)
            lx.pos += trim_length
            lx.ignore()
            if item.val:
                lx.items.append(item)
        return lex_left_delim
    lx.pos = len(lx.input)
    if lx.pos > lx.start:
        lx.items.append(lx.this_item(ItemType.TEXT))
    lx.items.append(Item(ItemType.EOF, lx.pos, "", lx.line_at(lx.pos)))
    return None


def lex_left_delim(lx: Lexer) -> Optional[StateFn]:
    lx.pos += len(LEFT_DELIM)
    trim_space = has_left_trim_marker(lx.rest())
    after_marker = TRIM_MARKER_LEN if trim_space else 0
    if lx.rest(after_marker).startswith(LEFT_COMMENT):
        lx.pos += after_marker
        lx.ignore()
        return lex_comment
    item = lx.this_item(ItemType.LEFT_DELIM)
    lx.inside_action = True
    lx.pos += after_marker
    lx.ignore()
    lx.paren_depth = 0
    return lx.emit_item(item)


def lex_comment(lx: Lexer) -> Optional[StateFn]:
    lx.pos += len(LEFT_COMMENT)
    x = lx.input.find(RIGHT_COMMENT, lx.pos)
    if x < 0:
        return lx.errorf("unclosed comment")
    lx.pos = x + len(RIGHT_COMMENT)
    delim, trim_space = lx.at_right_delim()
    if not delim:
        return lx.errorf("comment ends before closing delimiter")
    item = lx.this_item(ItemType.COMMENT)
    if trim_space:
        lx.pos += TRIM_MARKER_LEN
    lx.pos += len(RIGHT_DELIM)
    if trim_space:
        lx.pos += left_trim_length(lx.rest())
    lx.ignore()
    if lx.emit_comments:
        lx.items.append(item)
    return lex_text


def lex_right_delim(lx: Lexer) -> Optional[StateFn]:
    _, trim_space = lx.at_right_delim()
    if trim_space:
        lx.pos += TRIM_MARKER_LEN
        lx.ignore()
    lx.pos += len(RIGHT_DELIM)
    item = lx.this_item(ItemType.RIGHT_DELIM)
    if trim_space:
        lx.pos += left_trim_length(lx.rest())
        lx.ignore()
    lx.inside_action = False
    return lx.emit_item(item)


def lex_inside_action(lx: Lexer) -> Optional[StateFn]:
    delim, _ = lx.at_right_delim()
    if delim:
        if lx.paren_depth == 0:
            return lex_right_delim
        return lx.errorf("unclosed left paren")

    ch = lx.next()
    if ch == EOF:
        return lx.errorf("unclosed action")
    if is_space(ch):
        lx.backup()
        return lex_space
    if ch == "=":
        return lx.emit(ItemType.ASSIGN)
    if ch == ":":
        if lx.next() != "=":
            return lx.errorf("expected :=")
        return lx.emit(ItemType.DECLARE)
    if ch == "|":
        return lx.emit(ItemType.PIPE)
    if ch == '"':
        return lex_quote
    if ch == "`":
        return lex_raw_quote
    if ch == "$":
        return lex_variable
    if ch == "'":
        return lex_char
    if ch == ".":
        # ".5" is a number, ".Field" is a field.
        if lx.pos < len(lx.input):
            following = lx.input[lx.pos]
            if not ("0" <= following <= "9"):
                return lex_field
        lx.backup()
        return lex_number
    if ch in "+-" or "0" <= ch <= "9":
        lx.backup()
        return lex_number
    if is_alphanumeric(ch):
        lx.backup()
        return lex_identifier
    if ch == "(":
        lx.paren_depth += 1
        return lx.emit(ItemType.LEFT_PAREN)
    if ch == ")":
        lx.paren_depth -= 1
        if lx.paren_depth < 0:
            return lx.errorf("unexpected right paren")
        return lx.emit(ItemType.RIGHT_PAREN)
    if ord(ch) < 0x80 and ch.isprintable():
        return lx.emit(ItemType.CHAR)
    return lx.errorf(f"unrecognized character in action: {_describe_rune(ch)}")


def lex_space(lx: Lexer) -> Optional[StateFn]:
    num_spaces = 0
    while is_space(lx.peek()):
        lx.next()
        num_spaces += 1
    # A space may be the start of a " -}}" trim marker.
    if has_right_trim_marker(lx.input[lx.pos - 1 :]) and lx.input[lx.pos - 1 + TRIM_MARKER_LEN :].startswith(RIGHT_DELIM):
        lx.backup()
        if num_spaces == 1:
            return lex_right_delim
    return lx.emit(ItemType.SPACE)


def lex_identifier(lx: Lexer) -> Optional[StateFn]:
    while True:
        ch = lx.next()
        if is_alphanumeric(ch):
            continue
        lx.backup()
        word = lx.input[lx.start : lx.pos]
        if not lx.at_terminator():
            return lx.errorf(f"bad character {_describe_rune(ch)}")
        keyword = KEYWORDS.get(word)
        if keyword is not None:
            if (keyword is ItemType.BREAK and not lx.break_ok) or (keyword is ItemType.CONTINUE and not lx.continue_ok):
                return lx.emit(ItemType.IDENTIFIER)
            return lx.emit(keyword)
        if word in ("true", "false"):
            return lx.emit(ItemType.BOOL)
        return lx.emit(ItemType.IDENTIFIER)


def lex_field(lx: Lexer) -> Optional[StateFn]:
    return _lex_field_or_variable(lx, ItemType.FIELD)


def lex_variable(lx: Lexer) -> Optional[StateFn]:
    return _lex_field_or_variable(lx, ItemType.VARIABLE)


def _lex_field_or_variable(lx: Lexer, typ: ItemType) -> Optional[StateFn]:
    if lx.at_terminator():
        # A lone "." or "$".
        return lx.emit(ItemType.VARIABLE if typ is ItemType.VARIABLE else ItemType.DOT)
    while True:
        ch = lx.next()
        if not is_alphanumeric(ch):
            lx.backup()
            break
    if not lx.at_terminator():
        return lx.errorf(f"bad character {_describe_rune(ch)}")
    return lx.emit(typ)


def lex_char(lx: Lexer) -> Optional[StateFn]:
    while True:
        ch = lx.next()
        if ch == "\\":
            ch = lx.next()
            if ch not in (EOF, "\n"):
                continue
        if ch in (EOF, "\n"):
            return lx.errorf("unterminated character constant")
        if ch == "'":
            break
    return lx.emit(ItemType.CHAR_CONSTANT)


def lex_number(lx: Lexer) -> Optional[StateFn]:
    if not _scan_number(lx):
        return lx.errorf(f"bad number syntax: {go_quote(lx.input[lx.start:lx.pos])}")
    if lx.peek() in ("+", "-"):
        # Complex: 1+2i. No spaces, must end in 'i'.
        if not _scan_number(lx) or lx.input[lx.pos - 1] != "i":
            return lx.errorf(f"bad number syntax: {go_quote(lx.input[lx.start:lx.pos])}")
        return lx.emit(ItemType.COMPLEX)
    return lx.emit(ItemType.NUMBER)


def _scan_number(lx: Lexer) -> bool:
    lx.accept("+-")
    digits = "0123456789_"
    if lx.accept("0"):
        if lx.accept("xX"):
            digits = "0123456789abcdefABCDEF_"
        elif lx.accept("oO"):
            digits = "01234567_"
        elif lx.accept("bB"):
            digits = "01_"
    lx.accept_run(digits)
    if lx.accept("."):
        lx.accept_run(digits)
    if len(digits) == 11 and lx.accept("eE"):
        lx.accept("+-")
        lx.accept_run("0123456789_")
    if len(digits) == 23 and lx.accept("pP"):
        lx.accept("+-")
        lx.accept_run("0123456789_")
    lx.accept("i")
    if is_alphanumeric(lx.peek()):
        lx.next()
        return False
    return True


def lex_quote(lx: Lexer) -> Optional[StateFn]:
    while True:
        ch = lx.next()
        if ch == "\\":
            ch = lx.next()
            if ch not in (EOF, "\n"):
                continue
        if ch in (EOF, "\n"):
            return lx.errorf("unterminated quoted string")
        if ch == '"':
            break
    return lx.emit(ItemType.STRING)


def lex_raw_quote(lx: Lexer) -> Optional[StateFn]:
    while True:
        ch = lx.next()
        if ch == EOF:
            return lx.errorf("unterminated raw quoted string")
        if ch == "`":
            break
    return lx.emit(ItemType.RAW_STRING)


def lex(text: str, *, emit_comments: bool = False, break_ok: bool = True, continue_ok: bool = True) -> List[Item]:
    """Scan ``text`` and return its items, ending with ``EOF`` or ``ERROR``."""
    return Lexer(text, emit_comments=emit_comments, break_ok=break_ok, continue_ok=continue_ok).run()


__all__ = ["ItemType", "Item", "Lexer", "lex", "KEYWORDS"]
