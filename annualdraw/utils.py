from pathlib import Path
from datetime import datetime
from typing import Optional


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
EXPORT_STAMP_FORMAT = "%Y%m%d_%H%M%S"


def resolve_relative_path(path: str, project_root: Path) -> Path:
    """Resolve a './relative/path' string to an absolute path under ``project_root``.

    Absolute paths and other forms are returned as-is (wrapped in ``Path``).
    """
    prefix = "./"
    if not path.startswith(prefix):
        return Path(path)
    rel = path[len(prefix) :]
    return (project_root / rel).resolve()


def format_timestamp(dt: Optional[datetime]) -> str:
    """Format a local timestamp as ``yyyy-MM-dd HH:mm:ss`` for the result file.

    ``None`` formats as an empty string.
    """
    if dt is None:
        return ""
    return dt.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Inverse of :func:`format_timestamp`; returns ``None`` for unparsable text."""
    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FORMAT)
    except (AttributeError, ValueError):
        return None


def default_export_filename(now: Optional[datetime] = None) -> str:
    """File name suggested when exporting the results to a directory."""
    now = now or datetime.now()
    return f"年会抽奖结果_{now.strftime(EXPORT_STAMP_FORMAT)}.csv"
