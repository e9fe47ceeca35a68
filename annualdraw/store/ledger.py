"""Append-only, file-backed history of every committed winner."""

from __future__ import annotations

import csv
import io
import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..errors import ExportError
from ..models import WinnerRecord
from ..utils import default_export_filename, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

LEDGER_HEADER = ("奖项", "姓名", "中奖时间")


class WinnerLedger:
    """The single source of truth for who has already won.

    Records live in memory and are mirrored to a CSV result file. The
    in-memory history is authoritative: a failed file write is logged and the
    in-memory append stands.

    Parameters
    ----------
    path : Optional[Path], default: None
        Location of the result file. ``None`` keeps the ledger memory-only.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._records: list[WinnerRecord] = []
        self._winners: set[str] = set()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @classmethod
    def load(cls, path: Path) -> "WinnerLedger":
        """Create a ledger bound to ``path`` and restore any existing records.

        Undecodable bytes are replaced rather than failing the file, and
        rows the CSV reader rejects or that do not carry at least a prize
        and a participant are skipped one at a time. A read error keeps the
        rows restored before it.
        """

        ledger = cls(path)
        path = Path(path)
        if not path.exists():
            return ledger

        restored: list[WinnerRecord] = []
        try:
            with path.open(
                "r", encoding="utf-8-sig", errors="replace", newline=""
            ) as fh:
                reader = csv.reader(fh)
                while True:
                    try:
                        row = next(reader)
                    except StopIteration:
                        break
                    except csv.Error:
                        logger.warning(
                            "Skipping malformed row %d in %s", reader.line_num, path
                        )
                        continue
                    if reader.line_num == 1 and tuple(row) == LEDGER_HEADER:
                        continue
                    if len(row) < 2 or not row[1].strip():
                        continue
                    restored.append(
                        WinnerRecord(
                            prize_name=row[0],
                            participant_name=row[1],
                            timestamp=parse_timestamp(row[2]) if len(row) > 2 else None,
                        )
                    )
        except OSError:
            logger.exception("Failed to read winners from %s", path)

        ledger._records.extend(restored)
        ledger._winners.update(r.participant_name for r in restored)
        logger.info("Restored %d winner records from %s", len(restored), path)
        return ledger

    def has_won(self, name: str) -> bool:
        """Exact, case-sensitive membership test against all history."""
        return name in self._winners

    def remaining_pool(self, roster: Iterable[str]) -> list[str]:
        """Roster names that have not won yet, in roster order.

        Duplicate roster names share eligibility: once one of them has won,
        every identical entry is excluded.
        """
        return [name for name in roster if name not in self._winners]

    def append(self, records: Sequence[WinnerRecord]) -> None:
        """Add ``records`` to the history and persist them.

        The in-memory append is all-or-nothing: every item is validated
        before any is added. The result file append happens afterwards; an
        I/O failure there is logged and does not undo the in-memory append.

        Raises
        ------
        TypeError
            If any item is not a :class:`WinnerRecord`.
        """

        batch = list(records)
        for record in batch:
            if not isinstance(record, WinnerRecord):
                raise TypeError(f"Expected WinnerRecord, got {type(record).__name__}")
        if not batch:
            return

        self._records.extend(batch)
        self._winners.update(r.participant_name for r in batch)
        self._persist(batch)

    def _persist(self, batch: Sequence[WinnerRecord]) -> None:
        if self._path is None:
            return

        # One write per round so a crash loses at most this round's rows.
        buffer = io.StringIO()
        try:
            write_header = not self._path.exists() or self._path.stat().st_size == 0
            if write_header:
                csv.writer(buffer, lineterminator="\n").writerow(LEDGER_HEADER)
            writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
            for record in batch:
                writer.writerow(
                    (
                        record.prize_name,
                        record.participant_name,
                        format_timestamp(record.timestamp),
                    )
                )
            self._path.parent.mkdir(parents=True, exist_ok=True)
            encoding = "utf-8-sig" if write_header else "utf-8"
            with self._path.open("a", encoding=encoding, newline="") as fh:
                fh.write(buffer.getvalue())
        except OSError:
            logger.exception(
                "Failed to persist %d winner records to %s", len(batch), self._path
            )

    def clear(self) -> None:
        """Forget every record and delete the result file."""

        self._records.clear()
        self._winners.clear()
        if self._path is None:
            return
        try:
            self._path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to delete result file %s", self._path)

    def count(self) -> int:
        return len(self._records)

    def records(self) -> tuple[WinnerRecord, ...]:
        return tuple(self._records)

    def export_to(self, destination: Path) -> Path:
        """Copy the result file verbatim to ``destination``.

        Parameters
        ----------
        destination : Path
            Target file, or an existing directory in which case a
            time-stamped file name is generated.

        Returns
        -------
        Path
            The file that was written.

        Raises
        ------
        ExportError
            If there is no result file to copy or the target already exists.
        """

        if self._path is None or not self._path.exists():
            raise ExportError("There is no result file to export yet.")

        target = Path(destination)
        if target.is_dir():
            target = target / default_export_filename()

        try:
            with self._path.open("rb") as src:
                try:
                    dst = target.open("xb")
                except FileExistsError as exc:
                    raise ExportError(
                        f"Refusing to overwrite existing file {target}"
                    ) from exc
                try:
                    with dst:
                        shutil.copyfileobj(src, dst)
                except OSError:
                    # Remove the partial copy.
                    target.unlink(missing_ok=True)
                    raise
        except OSError as exc:
            raise ExportError(f"Failed to export results to {target}: {exc}") from exc

        logger.info("Exported results to %s", target)
        return target


__all__ = ["LEDGER_HEADER", "WinnerLedger"]
