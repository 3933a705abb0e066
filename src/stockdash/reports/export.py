"""CSV export document builder.

A document is a UTF-8 BOM followed by named sections separated by blank
lines. Each section is a title row, a header row and data rows, written
with the csv module (comma delimiter, minimal quoting, CRLF).
"""
import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional, Sequence, Tuple, Union

from stockdash.records.fields import amount_or_zero, field_value, timestamp_or_none, to_utc, is_blank
from stockdash.records.models import SummaryStats, TimeBucket

BOM = "\ufeff"
DELIMITER = ","
LINE_TERMINATOR = "\r\n"
NO_DATA = "No data available"
MISSING_TEXT = "N/A"

COLUMN_KINDS = ("text", "currency", "count", "timestamp", "day", "percent")


@dataclass(frozen=True)
class Column:
    """Table column reading ``field`` from each row."""
    header: str
    field: str
    kind: str = "text"

    def __post_init__(self):
        if self.kind not in COLUMN_KINDS:
            raise ValueError(f"Unknown column kind: {self.kind!r}")


@dataclass(frozen=True)
class Metric:
    """One line of a key/value section."""
    label: str
    value: Any
    kind: str = "text"


@dataclass
class TableSection:
    """Section rendering one row per record."""
    title: str
    columns: List[Column]
    rows: Sequence[Any] = ()


@dataclass
class KeyValueSection:
    """Section rendering label/value pairs."""
    title: str
    metrics: List[Metric] = field(default_factory=list)
    headers: Tuple[str, str] = ("Metric", "Value")


NamedSection = Union[TableSection, KeyValueSection]


class ExportDocumentBuilder:
    """Serializes report sections into a spreadsheet-safe CSV document."""

    def __init__(self, currency_label: str = "Frw"):
        self.currency_label = currency_label

    def build_document(self, sections: Sequence[NamedSection]) -> str:
        """
        Build the export document.

        Args:
            sections: Sections in output order

        Returns:
            Document text starting with a BOM; identical input gives
            identical output
        """
        buffer = io.StringIO()
        writer = csv.writer(
            buffer,
            delimiter=DELIMITER,
            quotechar='"',
            quoting=csv.QUOTE_MINIMAL,
            lineterminator=LINE_TERMINATOR
        )
        buffer.write(BOM)

        for index, section in enumerate(sections):
            if index:
                writer.writerow([])
            writer.writerow([section.title])
            if isinstance(section, KeyValueSection):
                self._write_metrics(writer, section)
            else:
                self._write_table(writer, section)

        return buffer.getvalue()

    def format_currency(self, value: Any) -> str:
        """Render an amount as '<label> 0.00'."""
        amount = amount_or_zero(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return f"{self.currency_label} {amount}"

    def format_cell(self, value: Any, kind: str = "text") -> str:
        """Render one value, substituting defaults for missing data."""
        if kind == "currency":
            return self.format_currency(value)
        if kind == "count":
            return _format_count(value)
        if kind == "percent":
            if is_blank(value):
                return MISSING_TEXT
            return f"{amount_or_zero(value)}%"
        if kind in ("timestamp", "day"):
            moment = timestamp_or_none(value)
            if moment is None:
                return MISSING_TEXT
            return moment.strftime("%Y-%m-%d" if kind == "day" else "%Y-%m-%d %H:%M:%S")
        if is_blank(value):
            return MISSING_TEXT
        return value if isinstance(value, str) else str(value)

    def _write_metrics(self, writer, section: KeyValueSection) -> None:
        writer.writerow(list(section.headers))
        if not section.metrics:
            writer.writerow([NO_DATA])
            return
        for metric in section.metrics:
            writer.writerow([metric.label, self.format_cell(metric.value, metric.kind)])

    def _write_table(self, writer, section: TableSection) -> None:
        writer.writerow([column.header for column in section.columns])
        if not section.rows:
            writer.writerow([NO_DATA])
            return
        for row in section.rows:
            writer.writerow([
                self.format_cell(field_value(row, column.field), column.kind)
                for column in section.columns
            ])


def summary_section(
    stats: SummaryStats,
    title: str = "Summary",
    total_label: str = "Total Amount",
    count_label: str = "Record Count",
    entity_label: str = "Unique Entities",
    average_label: str = "Average Amount",
    extra: Sequence[Metric] = ()
) -> KeyValueSection:
    """Key/value section for a SummaryStats."""
    metrics = [
        Metric(total_label, stats.total_amount, "currency"),
        Metric(count_label, stats.count, "count"),
        Metric(entity_label, stats.unique_entities, "count"),
        Metric(average_label, stats.average_amount, "currency"),
    ]
    metrics.extend(extra)
    return KeyValueSection(title=title, metrics=metrics)


def series_section(buckets: Sequence[TimeBucket], title: str, period_header: str = "Period") -> TableSection:
    """Table section for a time series."""
    return TableSection(
        title=title,
        columns=[Column(period_header, "label"), Column("Total", "total_amount", "currency")],
        rows=list(buckets)
    )


def export_filename(
    kind: str,
    start: Optional[Any] = None,
    end: Optional[Any] = None,
    on: Optional[date] = None
) -> str:
    """
    File name for an export.

    Returns:
        '<kind>_<date>.csv' without a range, otherwise
        '<kind>_<start>_to_<end>.csv' with 'start'/'end' for open bounds
    """
    slug = "_".join(kind.strip().lower().split())
    if start is None and end is None:
        day = on or datetime.now(timezone.utc).date()
        return f"{slug}_{day.isoformat()}.csv"
    return f"{slug}_{_iso_day(start) or 'start'}_to_{_iso_day(end) or 'end'}.csv"


def encode_document(document: str) -> bytes:
    """Encode a built document for writing; the BOM is already in the text."""
    return document.encode("utf-8")


def _iso_day(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value).date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip() or None


def _format_count(value: Any) -> str:
    count = amount_or_zero(value, "count")
    if count == count.to_integral_value():
        return str(int(count))
    return str(count)
