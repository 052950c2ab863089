"""
Regex helpers shared by the scrapers.

Scraped pages are matched left to right: ``consume`` returns the match and the
cursor just past it, so a later field can be searched for only after an
earlier one.
"""
from __future__ import annotations
import html
import re
from typing import Optional, Pattern, Union

_NEWLINES_RE = re.compile(r"(\r\n|\r|\n)")


def flatten(text: str) -> str:
    """Drop line breaks so patterns can span markup that was wrapped."""
    return _NEWLINES_RE.sub("", text)


def unescape(text: str) -> str:
    return html.unescape(text)


def consume(
    pattern: Union[str, Pattern[str]],
    text: str,
    pos: int = 0,
) -> tuple[Optional[re.Match], int]:
    """Search from ``pos``; return (match, end of match) or (None, pos)."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    m = regex.search(text, pos)
    if not m:
        return None, pos
    return m, m.end()
