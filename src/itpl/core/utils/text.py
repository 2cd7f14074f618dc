"""Go-compatible string quoting.

Template names are printed with Go's ``%q`` verb and string literals in
actions follow Go's escape rules, so both directions are implemented here
rather than borrowed from Python's ``repr``/``ast.literal_eval``, whose rules
differ (single quotes, ``\\x`` for Latin-1, no ``\\a``/``\\v`` in output).
"""
from __future__ import annotations

_SIMPLE_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

_SIMPLE_UNESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
}


def go_quote(value: str) -> str:
    """Return ``value`` as a double-quoted Go string literal (``strconv.Quote``)."""
    out = ['"']
    for ch in value:
        if ch in ('"', "\\"):
            out.append("\\" + ch)
        elif ch.isprintable():
            out.append(ch)
        elif ch in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[ch])
        else:
            code = ord(ch)
            if code < 0x20 or code == 0x7F:
                out.append(f"\\x{code:02x}")
            elif code < 0x10000:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def go_unquote(literal: str) -> str:
    """Interpret a Go string, raw string or character literal (``strconv.Unquote``).

    Raises:
        ValueError: If ``literal`` is not a well-formed literal.
    """
    if len(literal) < 2:
        raise ValueError("invalid syntax")
    quote = literal[0]
    if literal[-1] != quote:
        raise ValueError("invalid syntax")
    body = literal[1:-1]

    if quote == "`":
        if "`" in body:
            raise ValueError("invalid syntax")
        return body.replace("\r", "")

    if quote not in ('"', "'"):
        raise ValueError("invalid syntax")
    if "\n" in body:
        raise ValueError("invalid syntax")

    buf = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == quote:
            raise ValueError("invalid syntax")
        if ch != "\\":
            buf.extend(ch.encode("utf-8", "surrogateescape"))
            i += 1
            continue
        i += 1
        if i >= len(body):
            raise ValueError("invalid syntax")
        esc = body[i]
        i += 1
        if esc in _SIMPLE_UNESCAPES:
            buf.append(_SIMPLE_UNESCAPES[esc])
        elif esc == quote:
            buf.append(ord(esc))
        elif esc in "xuU":
            width = {"x": 2, "u": 4, "U": 8}[esc]
            digits = body[i : i + width]
            if len(digits) != width or not _is_hex(digits):
                raise ValueError("invalid syntax")
            i += width
            code = int(digits, 16)
            if esc == "x":
                buf.append(code)
            else:
                if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                    raise ValueError("invalid syntax")
                buf.extend(chr(code).encode("utf-8"))
        elif esc in "01234567":
            digits = body[i - 1 : i + 2]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise ValueError("invalid syntax")
            i += 2
            code = int(digits, 8)
            if code > 0xFF:
                raise ValueError("invalid syntax")
            buf.append(code)
        else:
            raise ValueError("invalid syntax")

    text = buf.decode("utf-8", "surrogateescape")
    if quote == "'" and len(text) != 1:
        raise ValueError("invalid syntax")
    return text


def _is_hex(digits: str) -> bool:
    return all(d in "0123456789abcdefABCDEF" for d in digits)


__all__ = ["go_quote", "go_unquote"]
