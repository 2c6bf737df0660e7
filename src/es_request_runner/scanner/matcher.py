"""Request header matcher.

Recognises lines such as::

    GET /index/_search?size=5
    post /index/_bulk @data/docs.ndjson   // load body from file
"""

import re
from dataclasses import dataclass

METHODS = ("GET", "POST", "PUT", "DELETE", "HEAD", "PATCH")

HEADER_PATTERN = re.compile(
    r"^\s*(?P<method>" + "|".join(METHODS) + r")"
    r"[ \t]+(?P<path>[^\s@][^\s]*)"
    r"(?:[ \t]+@(?P<file>[^\s]+))?"
    r"(?:[ \t]+(?://|#).*)?"
    r"\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class HeaderMatch:
    """Texts and [start, end) columns of a matched header line."""

    method: str
    method_span: tuple[int, int]
    path: str
    path_span: tuple[int, int]
    file_ref: str | None = None
    file_ref_span: tuple[int, int] | None = None


def match_header(text: str) -> HeaderMatch | None:
    """Match one line against the header grammar; ``None`` when it is not a header."""
    match = HEADER_PATTERN.match(text)
    if match is None:
        return None

    file_ref = match.group("file")
    return HeaderMatch(
        method=match.group("method"),
        method_span=match.span("method"),
        path=match.group("path"),
        path_span=match.span("path"),
        file_ref=file_ref,
        file_ref_span=match.span("file") if file_ref else None,
    )
