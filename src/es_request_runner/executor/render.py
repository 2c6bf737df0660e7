"""Turn execution results into text for the terminal or a scratch document."""

import json
from pathlib import Path
from typing import Any

from es_request_runner.executor.result import ExecutionResult, Ok

RESULT_FILENAME = "result.json"
SCRATCH_DIR = Path.home() / ".es-request-runner"


def format_payload(payload: Any, indent: int = 2) -> str:
    """Pretty-print JSON payloads; strings that are not JSON pass through."""
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return payload
    try:
        return json.dumps(payload, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(payload)


def render_result(result: ExecutionResult, indent: int = 2) -> str:
    if isinstance(result, Ok):
        return format_payload(result.body, indent)
    if result.raw_body not in (None, ""):
        return format_payload(result.raw_body, indent)
    return result.message


def result_title(result: ExecutionResult) -> str:
    return f"Elasticsearch Results[{result.elapsed_ms}ms]"


def write_result_document(text: str, workspace_root: Path | None = None) -> Path:
    """Overwrite ``result.json`` in the workspace root (or the scratch dir) with ``text``."""
    directory = workspace_root or SCRATCH_DIR
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / RESULT_FILENAME
    path.write_text(text, encoding="utf-8")
    return path
