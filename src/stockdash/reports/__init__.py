"""Report aggregation and CSV export."""
from .aggregator import ReportAggregator, period_growth, GRANULARITIES
from .export import (
    ExportDocumentBuilder,
    TableSection,
    KeyValueSection,
    Column,
    Metric,
    summary_section,
    series_section,
    export_filename,
    encode_document,
    NO_DATA,
    BOM
)
from .writer import save_document, CSV_MIME_TYPE

__all__ = [
    "ReportAggregator",
    "period_growth",
    "GRANULARITIES",
    "ExportDocumentBuilder",
    "TableSection",
    "KeyValueSection",
    "Column",
    "Metric",
    "summary_section",
    "series_section",
    "export_filename",
    "encode_document",
    "NO_DATA",
    "BOM",
    "save_document",
    "CSV_MIME_TYPE"
]
