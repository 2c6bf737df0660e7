"""Resolve a region's external body file."""

from pathlib import Path

from es_request_runner.scanner.base import Region


def resolve_file_ref(region: Region, base_dir: Path | None = None) -> Path | None:
    """Absolute path of the file referenced by ``region``, if it has one.

    Relative references are resolved against ``base_dir`` (normally the
    directory of the scanned document), else the working directory.
    """
    if region.file_ref is None:
        return None
    path = Path(region.file_ref.text).expanduser()
    if not path.is_absolute():
        path = (base_dir or Path.cwd()) / path
    return path.resolve()
