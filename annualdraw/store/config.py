"""Parsing and writing of the ``data.conf`` prize configuration."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..models import ParsedConfig, PrizeTier

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "2026 公司年会抽奖"
DEFAULT_PRIZE_TIERS: tuple[PrizeTier, ...] = (
    PrizeTier("特等奖", 1),
    PrizeTier("一等奖", 3),
    PrizeTier("二等奖", 5),
    PrizeTier("三等奖", 10),
    PrizeTier("幸运奖", 20),
)
DEFAULT_SELECTED_TIER = "三等奖"

# ASCII "=" or the full-width colon.
_SEPARATOR = re.compile("[=：]")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_count(raw: str) -> int:
    text = raw.strip()
    if _INTEGER.fullmatch(text):
        count = int(text)
        if count > 0:
            return count
    return 1


def parse_config(lines: Iterable[object]) -> ParsedConfig:
    """Parse config lines into a title and an ordered list of prize tiers.

    Parameters
    ----------
    lines : Iterable[object]
        Raw lines of the config file. Non-string entries are ignored.

    Returns
    -------
    ParsedConfig
        The first non-empty ``Title`` value (or ``None``) and the tiers in
        order of first appearance.

    Notes
    -----
    Lines are ``key=value`` or ``key：value``. Blank lines and lines
    starting with ``#`` are skipped. A key equal to ``Title`` (any case) sets
    the title and never becomes a tier. Every other line defines a tier
    ``name=count`` where a missing, malformed or non-positive count means 1.
    When a tier name repeats, the tier keeps the position of its first
    occurrence and takes the quota of its last one.

    Malformed lines are dropped one at a time; this function never raises.
    """

    title: Optional[str] = None
    order: list[str] = []
    quotas: dict[str, int] = {}

    for raw in lines:
        if not isinstance(raw, str):
            continue
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        parts = _SEPARATOR.split(line)
        if len(parts) >= 2 and parts[0].strip().lower() == "title":
            value = parts[1].strip()
            if value and title is None:
                title = value
            continue

        name = parts[0].strip()
        if not name:
            logger.debug("Skipping config line without a tier name")
            continue

        count = _parse_count(parts[1]) if len(parts) >= 2 else 1
        if name not in quotas:
            order.append(name)
        quotas[name] = count

    return ParsedConfig(
        title=title,
        tiers=tuple(PrizeTier(name, quotas[name]) for name in order),
    )


def render_default_config(
    title: str = DEFAULT_TITLE,
    tiers: Sequence[PrizeTier] = DEFAULT_PRIZE_TIERS,
) -> str:
    """Return the text written to ``data.conf`` by a full reset."""

    lines = [
        "# 抽奖配置：由应用在“恢复默认”操作时自动生成",
        "# 标题配置",
        f"Title={title}",
        "",
        "# 奖项配置示例（名称=人数）",
    ]
    lines.extend(f"{tier.name}={tier.quota}" for tier in tiers)
    return "\n".join(lines) + "\n"


def load_config_file(path: Path) -> Optional[ParsedConfig]:
    """Read and parse ``path``.

    Returns ``None`` when the file does not exist or cannot be read; read
    failures are logged, never raised. Undecodable bytes are replaced so a
    bad line never discards the rest of the file.
    """

    path = Path(path)
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError:
        logger.exception("Failed to read config file %s", path)
        return None
    return parse_config(text.splitlines())


def write_config_file(path: Path, text: str) -> bool:
    """Overwrite ``path`` with ``text``.

    Returns
    -------
    bool
        ``True`` on success. I/O errors are logged and reported as ``False``
        because the in-memory configuration stays authoritative.
    """

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError:
        logger.exception("Failed to write config file %s", path)
        return False
    return True


__all__ = [
    "DEFAULT_PRIZE_TIERS",
    "DEFAULT_SELECTED_TIER",
    "DEFAULT_TITLE",
    "load_config_file",
    "parse_config",
    "render_default_config",
    "write_config_file",
]
