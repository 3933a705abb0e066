"""Persist built export documents."""
from pathlib import Path

from .export import encode_document
from stockdash.utils.logger import get_logger
from stockdash.utils.exceptions import ExportIOError

logger = get_logger()

CSV_MIME_TYPE = "text/csv"


def save_document(document: str, directory: Path, filename: str) -> Path:
    """
    Write an export document to disk.

    Args:
        document: Built document text
        directory: Target directory, created if missing
        filename: File name from export_filename()

    Returns:
        Path of the written file

    Raises:
        ExportIOError: directory or file could not be written
    """
    path = Path(directory) / filename
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encode_document(document))
    except OSError as e:
        logger.error(f"Export write failed for {path}: {e}")
        raise ExportIOError(path, e)

    logger.info(f"Saved export {path.name} ({path.stat().st_size} bytes)")
    return path
