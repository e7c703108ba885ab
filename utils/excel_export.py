"""Export tabular rows to downloadable Excel workbooks.

Rows are either a list of mappings (one per record) or a pandas
``DataFrame``.  Each non-empty group of rows becomes one worksheet whose
columns are sized to their content.  The finished workbook is handed to
a *sink* callable which decides what "download" means: writing to a
directory, feeding ``st.download_button`` and so on.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

MAX_COLUMN_WIDTH = 50
COLUMN_PADDING = 2
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

Rows = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]
ColumnPairs = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mime: str = XLSX_MIME


Sink = Callable[[ExportFile], None]


def _records(rows: Rows) -> List[Dict[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict("records")
    return [dict(row) for row in rows]


def _columns(records: Iterable[Mapping[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


def _cell_text_length(value: Any) -> int:
    if value is None:
        return 0
    try:
        if pd.isna(value):
            return 0
    except (TypeError, ValueError):
        # list-like cells have no scalar NA state
        pass
    return len(str(value))


def compute_column_widths(rows: Rows) -> List[int]:
    """Return the display width of every column.

    Width is the longer of the header and the longest cell text plus
    padding, capped at :data:`MAX_COLUMN_WIDTH`.
    """

    records = _records(rows)
    widths = []
    for column in _columns(records):
        longest = max([len(str(column))] + [_cell_text_length(r.get(column)) for r in records])
        widths.append(min(longest + COLUMN_PADDING, MAX_COLUMN_WIDTH))
    return widths


@dataclass(frozen=True)
class ExportSheet:
    """Rows destined for a single worksheet."""

    rows: Rows
    label: str = "Sheet1"

    @property
    def records(self) -> List[Dict[str, Any]]:
        return _records(self.rows)

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    @property
    def columns(self) -> List[str]:
        return _columns(self.records)

    @property
    def column_widths(self) -> List[int]:
        return compute_column_widths(self.rows)


def _normalise_mapping(mapping: Union[ColumnPairs, Mapping[str, str]]) -> List[Tuple[str, str]]:
    if isinstance(mapping, Mapping):
        return list(mapping.items())
    return [(source, label) for source, label in mapping]


def remap_columns(rows: Rows, mapping: Union[ColumnPairs, Mapping[str, str]]) -> Rows:
    """Keep only mapped fields, renamed and ordered as in ``mapping``.

    ``mapping`` is a sequence of ``(source_field, display_name)`` pairs; a
    dict is read in insertion order.  Fields missing from a row become
    ``None``.
    """

    pairs = _normalise_mapping(mapping)
    if isinstance(rows, pd.DataFrame):
        sources = [source for source, _ in pairs]
        remapped = rows.reindex(columns=sources)
        remapped.columns = [label for _, label in pairs]
        return remapped
    return [{label: row.get(source) for source, label in pairs} for row in rows]


def build_filename(base_name: str, today: Optional[date] = None) -> str:
    """Return ``<base_name>_<YYYY-MM-DD>.xlsx`` for the export date."""

    if today is None:
        today = datetime.now(timezone.utc).date()
    return f"{base_name}_{today.isoformat()}.xlsx"


def build_workbook(sheets: Sequence[ExportSheet]) -> bytes:
    """Render ``sheets`` into an xlsx workbook and return its bytes.

    Raises ``ValueError`` when two sheets share a label.
    """

    seen = set()
    for sheet in sheets:
        if sheet.label in seen:
            raise ValueError(f"Duplicate sheet name: {sheet.label}")
        seen.add(sheet.label)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for sheet in sheets:
            frame = pd.DataFrame(sheet.records, columns=sheet.columns)
            frame.to_excel(writer, sheet_name=sheet.label, index=False)
            worksheet = writer.sheets[sheet.label]
            for idx, width in enumerate(sheet.column_widths, start=1):
                worksheet.column_dimensions[get_column_letter(idx)].width = width
    return output.getvalue()


def directory_sink(directory: Union[str, Path]) -> Sink:
    """Return a sink that writes exports into ``directory``."""

    target = Path(directory)

    def _write(export: ExportFile) -> None:
        target.mkdir(parents=True, exist_ok=True)
        (target / export.filename).write_bytes(export.content)
        logger.info("Wrote %s (%d bytes)", target / export.filename, len(export.content))

    return _write


class ExcelExporter:
    """Build workbooks from row collections and deliver them to a sink."""

    def __init__(self, sink: Sink, clock: Optional[Callable[[], date]] = None):
        self.sink = sink
        self.clock = clock

    def _filename(self, base_name: str) -> str:
        return build_filename(base_name, self.clock() if self.clock else None)

    def export_single(self, rows: Rows, base_name: str, sheet_label: str = "Sheet1") -> Optional[ExportFile]:
        """Export one sheet; empty ``rows`` are logged and skipped."""

        sheet = ExportSheet(rows=rows, label=sheet_label)
        if sheet.is_empty:
            logger.warning("No data to export for %s", base_name)
            return None
        return self._deliver([sheet], base_name)

    def export_multiple(self, sheets: Sequence[ExportSheet], base_name: str) -> Optional[ExportFile]:
        """Export all non-empty sheets into a single workbook.

        Empty sheets are skipped one by one.  When nothing is left the
        export is suppressed entirely.
        """

        kept = []
        for sheet in sheets:
            if sheet.is_empty:
                logger.warning("Skipping empty sheet %r in %s", sheet.label, base_name)
                continue
            kept.append(sheet)
        if not kept:
            logger.warning("No sheets to export for %s", base_name)
            return None
        return self._deliver(kept, base_name)

    def _deliver(self, sheets: Sequence[ExportSheet], base_name: str) -> ExportFile:
        export = ExportFile(filename=self._filename(base_name), content=build_workbook(sheets))
        self.sink(export)
        logger.info("Exported %d sheet(s) to %s", len(sheets), export.filename)
        return export
