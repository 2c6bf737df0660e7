"""Document scanner: builds the ordered region list and tracks the selection."""

import logging

from .base import Position, Range, Region, Token
from .body import extract_body
from .document import Document
from .matcher import HeaderMatch, match_header

logger = logging.getLogger(__name__)


class DocumentScanner:
    """Single pass, line oriented scan of a request document.

    A header is only known to have a body once the next non-blank line
    is seen, so the decision is deferred by one line and applied to the
    most recently created region.
    """

    def scan(self, document: Document | None) -> list[Region]:
        if document is None:
            logger.warning("scan(): no document to scan")
            return []

        texts = [line.text for line in document.lines]
        regions: list[Region] = []
        pending_header_without_body = False

        i = 0
        while i < len(texts):
            text = texts[i]
            trimmed = text.strip()
            if not trimmed:
                i += 1
                continue

            if pending_header_without_body:
                pending_header_without_body = False
                if trimmed.startswith("{"):
                    i = self._attach_body(regions[-1], texts, i) + 1
                    continue

            match = match_header(text)
            if match is not None:
                regions.append(self._make_region(match, i, len(text)))
                pending_header_without_body = True
            i += 1

        logger.debug("scanned %d lines, found %d regions", len(texts), len(regions))
        return regions

    def _make_region(self, match: HeaderMatch, line: int, length: int) -> Region:
        file_ref = None
        if match.file_ref is not None:
            file_ref = _token(match.file_ref, line, match.file_ref_span)
        return Region(
            method=_token(match.method, line, match.method_span),
            path=_token(match.path, line, match.path_span),
            file_ref=file_ref,
            range=Range.single_line(line, length),
        )

    def _attach_body(self, region: Region, texts: list[str], start: int) -> int:
        """Attach the body starting at ``start``; return its last line index."""
        end, is_bulk = extract_body(texts, start, region.path.text)
        body_range = Range.span(start, 0, end, len(texts[end]))
        region.body = Token(text="\n".join(texts[start:end + 1]), range=body_range)
        region.has_body = True
        region.is_bulk = is_bulk
        region.range = Range(start=region.range.start, end=body_range.end)
        return end


def _token(text: str, line: int, span: tuple[int, int]) -> Token:
    return Token(text=text, range=Range.span(line, span[0], line, span[1]))


def update_selection(regions: list[Region], selection: Position | Range) -> Region | None:
    """Mark the region containing ``selection`` as selected and clear the rest.

    If ranges ever overlapped, the last containing region wins.
    """
    selected = None
    for region in regions:
        region.selected = False
        if region.range.contains(selection):
            selected = region
    if selected is not None:
        selected.selected = True
    return selected


def region_at_line(regions: list[Region], line: int) -> Region | None:
    """Region whose range covers ``line`` (zero-based), if any. Selection is untouched."""
    found = None
    for region in regions:
        if region.range.start.line <= line <= region.range.end.line:
            found = region
    return found


def scan_document(document: Document | None, selection: Position | Range | None = None) -> list[Region]:
    """Scan ``document`` and, when given, apply ``selection`` to the fresh list."""
    regions = DocumentScanner().scan(document)
    if selection is not None:
        update_selection(regions, selection)
    return regions
