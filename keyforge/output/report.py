"""
KeyForge Report Generator
==========================

JSON and CSV export of generation results and history records, plus JSON
import of history files.

- Generation reports: JSON with metadata and one entry per result. Values
  can be redacted for sharing.
- History files: a JSON array of :class:`HistoryRecord`, the same shape
  that is read back by :meth:`ForgeReportGenerator.import_history_json`.
- History CSV: ``Label,Password,Strength,Tags,Created Date``, every field
  quoted, UTF-8 with a byte-order mark so spreadsheet tools detect the
  encoding. Tags are joined with ``;``.

References:
    - RFC 4180 (2005). Common Format and MIME Type for CSV Files.
    - RFC 8259 (2017). The JavaScript Object Notation (JSON) Data
      Interchange Format.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from keyforge import __version__
from keyforge.core.errors import InvalidArgument
from keyforge.core.models import (
    GeneratedPassphrase,
    GeneratedPassword,
    HistoryRecord,
)

CSV_HEADER = ("Label", "Password", "Strength", "Tags", "Created Date")
CSV_BOM = "\ufeff"

_HISTORY_ADAPTER: TypeAdapter[list[HistoryRecord]] = TypeAdapter(list[HistoryRecord])

AnyResult = Union[GeneratedPassword, GeneratedPassphrase]


class ForgeReportGenerator:
    """Writes and reads KeyForge JSON / CSV files.

    Usage::

        reports = ForgeReportGenerator()
        reports.generate_json(results, Path("passwords.json"))
        reports.append_history([record], Path("history.json"))
        records = reports.import_history_json(Path("history.json"))
        reports.generate_csv(records, Path("history.csv"))
    """

    # ------------------------------------------------------------------ #
    #  Generation reports
    # ------------------------------------------------------------------ #

    def build_report(
        self, results: Sequence[AnyResult], *, redact: bool = False
    ) -> dict[str, Any]:
        """Plain-dict report for *results*, optionally with secrets redacted."""
        items = [r.redacted() if redact else r for r in results]
        return {
            "report_metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool": "keyforge",
                "version": __version__,
                "redacted": redact,
            },
            "summary": {
                "count": len(items),
                "kinds": sorted({r.kind for r in items}),
            },
            "results": [r.model_dump(mode="json") for r in items],
        }

    def generate_json(
        self,
        results: Sequence[AnyResult],
        output_path: Path,
        *,
        redact: bool = False,
    ) -> Path:
        """Write a JSON generation report to *output_path*."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            json.dumps(
                self.build_report(results, redact=redact),
                indent=2,
                ensure_ascii=False,
                default=str,
            ),
            encoding="utf-8",
        )
        return output_path

    # ------------------------------------------------------------------ #
    #  History JSON
    # ------------------------------------------------------------------ #

    def export_history_json(
        self, records: Sequence[HistoryRecord], output_path: Path
    ) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(
            _HISTORY_ADAPTER.dump_json(list(records), indent=2)
        )
        return output_path

    def import_history_json(self, path: Path) -> list[HistoryRecord]:
        """Read a history file written by :meth:`export_history_json`.

        Raises:
            InvalidArgument: If the file is not a valid history array.
            FileNotFoundError: If *path* does not exist.
        """
        try:
            return _HISTORY_ADAPTER.validate_json(path.read_bytes())
        except ValidationError as exc:
            raise InvalidArgument(
                f"{path} is not a valid KeyForge history file: "
                f"{exc.error_count()} validation error(s)"
            ) from exc

    def append_history(
        self, records: Sequence[HistoryRecord], path: Path
    ) -> list[HistoryRecord]:
        """Add *records* to the history file at *path* (created if missing).

        A record whose id already exists replaces the stored one.

        Returns:
            The full, updated record list.
        """
        existing = self.import_history_json(path) if path.exists() else []
        incoming = {r.id: r for r in records}
        merged = [incoming.pop(r.id, r) for r in existing]
        merged.extend(incoming.values())
        self.export_history_json(merged, path)
        return merged

    # ------------------------------------------------------------------ #
    #  History CSV
    # ------------------------------------------------------------------ #

    def render_csv(self, records: Sequence[HistoryRecord]) -> str:
        """CSV text (BOM included) for *records*."""
        buffer = io.StringIO()
        buffer.write(CSV_BOM)
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for r in records:
            writer.writerow(
                (
                    r.label or "",
                    r.password,
                    r.strength_level.label,
                    ";".join(r.tags),
                    r.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                )
            )
        return buffer.getvalue()

    def generate_csv(
        self, records: Sequence[HistoryRecord], output_path: Path
    ) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(
            self.render_csv(records), encoding="utf-8", newline=""
        )
        return output_path
