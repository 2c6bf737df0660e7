"""Re-indent request bodies in place."""

import json
import logging

from es_request_runner.scanner.base import Region
from es_request_runner.scanner.document import Document
from es_request_runner.scanner.regions import DocumentScanner

logger = logging.getLogger(__name__)


def format_body_text(text: str, indent: int, is_bulk: bool) -> str:
    """Pretty-print a JSON body, or compact each document of a bulk body.

    Raises ValueError when the body is not valid JSON.
    """
    if is_bulk:
        docs = [json.loads(line) for line in text.splitlines() if line.strip()]
        return "\n".join(json.dumps(doc, ensure_ascii=False) for doc in docs)
    return json.dumps(json.loads(text), indent=indent, ensure_ascii=False)


def format_region_body(document: Document, region: Region, indent: int = 2) -> Document | None:
    """New document with the region's body re-indented; ``None`` if there is nothing to do."""
    if region.body is None:
        return None
    try:
        formatted = format_body_text(region.body.text, indent, region.is_bulk)
    except ValueError as e:
        logger.warning("%s (line %d): body is not valid JSON: %s", region.label, region.line + 1, e)
        return None
    if formatted == region.body.text:
        return None
    return document.replace(region.body.range, formatted.replace("\n", document.newline))


def format_document(document: Document, indent: int = 2) -> tuple[Document, int]:
    """Format every body; returns the new document and how many bodies changed."""
    regions = DocumentScanner().scan(document)
    changed = 0
    # Bottom-up, so earlier ranges are still valid after each replace.
    for region in reversed(regions):
        updated = format_region_body(document, region, indent)
        if updated is not None:
            document = updated
            changed += 1
    return document, changed
