"""
Git-style C quoting for paths in diff headers.

Git wraps a path in double quotes when it contains a quote, a backslash,
a control character or (with core.quotePath) a non-ASCII byte, and escapes
those characters C-style with non-ASCII bytes written as three-digit octal.
"""

import re

_UNESCAPES = {
    "a": "\a", "b": "\b", "t": "\t", "n": "\n",
    "v": "\v", "f": "\f", "r": "\r", '"': '"', "\\": "\\",
}
_ESCAPES = {value: key for key, value in _UNESCAPES.items()}
_OCTAL = re.compile(r"[0-7]{3}")


def needs_quoting(path: str) -> bool:
    return any(ch in _ESCAPES or ord(ch) < 0x20 or ord(ch) > 0x7E for ch in path)


def quote_path(path: str) -> str:
    """Quote a path the way git writes it in a diff header."""
    parts = ['"']
    for ch in path:
        if ch in _ESCAPES:
            parts.append("\\" + _ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) > 0x7E:
            parts.extend(f"\\{byte:03o}" for byte in ch.encode("utf-8"))
        else:
            parts.append(ch)
    parts.append('"')
    return "".join(parts)


def unquote_path(quoted: str) -> str:
    """
    Undo git's C quoting on the inside of a quoted path (quotes already removed).

    Octal escapes are collected as raw bytes so multi-byte UTF-8 names survive.
    """
    out = bytearray()
    i = 0
    while i < len(quoted):
        ch = quoted[i]
        if ch == "\\" and i + 1 < len(quoted):
            if _OCTAL.match(quoted, i + 1):
                out.append(int(quoted[i + 1:i + 4], 8) & 0xFF)
                i += 4
                continue
            nxt = quoted[i + 1]
            out.extend(_UNESCAPES.get(nxt, nxt).encode("utf-8"))
            i += 2
            continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return out.decode("utf-8", errors="replace")
