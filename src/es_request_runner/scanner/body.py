"""Body boundary detection for JSON and NDJSON payloads.

Bodies are never validated here: the scanner only decides which lines
belong to a region. A body that never closes runs to the end of the
document, since the user may be in the middle of typing it.
"""

import json
import re
from collections.abc import Sequence

BULK_SUFFIXES = ("_bulk", "_msearch", "_msearch/template")


def is_bulk_path(path: str) -> bool:
    """Whether the endpoint expects newline-delimited JSON."""
    bare = path.split("?", 1)[0].rstrip("/")
    return bare.endswith(BULK_SUFFIXES)


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside string literals.

    Newlines inside block comments are kept so line numbers do not move.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            comment = text[i:] if end == -1 else text[i:end + 2]
            out.append("\n" * comment.count("\n"))
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


class _DepthCounter:
    """Brace depth across lines, skipping strings and comments."""

    def __init__(self):
        self.depth = 0
        self.in_block_comment = False

    def feed(self, line: str) -> bool:
        """Consume one line; return True if depth came back to zero on it."""
        closed = False
        in_string = False
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            if self.in_block_comment:
                if line.startswith("*/", i):
                    self.in_block_comment = False
                    i += 2
                    continue
            elif in_string:
                if ch == "\\":
                    i += 2
                    continue
                if ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif line.startswith("//", i):
                break
            elif line.startswith("/*", i):
                self.in_block_comment = True
                i += 2
                continue
            elif ch == "{":
                self.depth += 1
            elif ch == "}":
                self.depth -= 1
                if self.depth <= 0:
                    self.depth = 0
                    closed = True
                    break
            i += 1
        return closed


def find_json_end(lines: Sequence[str], start: int) -> int:
    """Index of the line closing the JSON value opened on ``lines[start]``.

    Falls back to the last line when the braces never balance.
    """
    counter = _DepthCounter()
    for index in range(start, len(lines)):
        if counter.feed(lines[index]):
            return index
    return len(lines) - 1


def is_json_value(line: str) -> bool:
    """Whether a single line holds one complete JSON value."""
    stripped = strip_json_comments(line).strip()
    if not stripped:
        return False
    try:
        json.loads(stripped)
    except ValueError:
        return False
    return True


def find_ndjson_end(lines: Sequence[str], start: int) -> int | None:
    """Last index of consecutive one-line JSON documents starting at ``start``.

    Returns ``None`` when ``lines[start]`` is not a JSON value by itself.
    """
    end = None
    for index in range(start, len(lines)):
        if not is_json_value(lines[index]):
            break
        end = index
    return end


_OPENS_OBJECT = re.compile(r"^\s*\{")


def extract_body(lines: Sequence[str], start: int, path: str) -> tuple[int, bool]:
    """Decide where a body opened on ``lines[start]`` ends and whether it is bulk.

    The endpoint path is the primary bulk signal. A non-bulk path whose
    body is a run of one-line JSON objects is treated as bulk as well.
    """
    if is_bulk_path(path):
        end = find_ndjson_end(lines, start)
        if end is None:
            end = find_json_end(lines, start)
        return end, True

    end = find_json_end(lines, start)
    if end == start and end + 1 < len(lines) and _OPENS_OBJECT.match(lines[end + 1]):
        ndjson_end = find_ndjson_end(lines, start)
        if ndjson_end is not None and ndjson_end > start:
            return ndjson_end, True
    return end, False
