"""Good-enough conversion of markdown to plain text."""

import re

_HEADING = re.compile(r"^((#+) +(.*$))", re.MULTILINE)
_FENCE = re.compile(r"\n```.*$", re.MULTILINE)
_LINK = re.compile(r"\(http[^)]*\)", re.MULTILINE)
_UNDERLINES = {1: "=", 2: "-"}


def _width(text: str) -> int:
    return len(text.encode("utf-8"))


def to_text(text: str) -> str:
    """Convert markdown to plain text.

    First and second level headings are underlined, code fence lines are
    dropped and parenthesised http links are removed.
    """
    for match in list(_HEADING.finditer(text)):
        whole, hashes, title = match.groups()
        underline = _UNDERLINES.get(len(hashes))
        suffix = "\n" + underline * _width(title) if underline else ""
        text = text.replace(whole, title + suffix)
    text = _FENCE.sub("", text)
    return _LINK.sub("", text)


def wrap(text: str, cols: int) -> str:
    """Wrap every line of ``text`` so it fits within ``cols`` columns."""
    return "".join(_wrap_line(line, cols) + "\n" for line in _lines(text))


def _lines(text: str) -> list:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _wrap_line(text: str, cols: int) -> str:
    result = ""
    line = ""
    for word in text.split(" "):
        if _width(word) + _width(line) < cols:
            if line:
                line += " "
            line += word
        else:
            result += line
            line = "\n" + word
    return result + line