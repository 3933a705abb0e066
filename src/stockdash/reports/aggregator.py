"""Order and expense aggregation: totals, period buckets and date filtering."""
from collections import defaultdict, Counter
from datetime import date, datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Sequence

from stockdash.records.models import TimeBucket, SummaryStats
from stockdash.records.fields import (
    amount_or_zero,
    field_value,
    timestamp_or_none,
    parse_timestamp,
    to_utc,
    is_blank,
    ZERO
)
from stockdash.utils.logger import get_logger

logger = get_logger()

GRANULARITIES = {
    "day": "%Y-%m-%d",
    "month": "%Y-%m",
}


class ReportAggregator:
    """Aggregates records by total, calendar period and date range.

    Records may be record objects or plain mapping rows. All calendar
    arithmetic happens in UTC.
    """

    def __init__(
        self,
        amount_field: str = "amount",
        date_field: str = "created_at",
        group_field: str = "customer_name"
    ):
        self.amount_field = amount_field
        self.date_field = date_field
        self.group_field = group_field

    def compute_summary(self, records: Iterable[Any]) -> SummaryStats:
        """
        Summarize a record set.

        Args:
            records: Records to summarize, possibly empty

        Returns:
            SummaryStats with total amount, record count and the number of
            distinct non-blank grouping values
        """
        total = ZERO
        count = 0
        entities = set()

        for record in records:
            count += 1
            total += self._amount(record)
            entity = field_value(record, self.group_field)
            if not is_blank(entity):
                entities.add(entity.strip() if isinstance(entity, str) else entity)

        return SummaryStats(total_amount=total, count=count, unique_entities=len(entities))

    def bucket_by_period(self, records: Iterable[Any], granularity: str) -> List[TimeBucket]:
        """
        Group record amounts by calendar day or month.

        Args:
            records: Records to bucket
            granularity: "day" or "month"

        Returns:
            Buckets in ascending chronological order; records without a
            parseable timestamp are left out
        """
        if granularity not in GRANULARITIES:
            raise ValueError(f"Unsupported granularity: {granularity!r}")
        label_format = GRANULARITIES[granularity]

        totals = defaultdict(Decimal)
        skipped = 0
        for record in records:
            moment = timestamp_or_none(field_value(record, self.date_field), self.date_field)
            if moment is None:
                skipped += 1
                continue
            totals[moment.strftime(label_format)] += self._amount(record)

        if skipped:
            logger.debug(f"Skipped {skipped} records without a usable {self.date_field}")

        # Zero-padded ISO labels sort chronologically
        return [TimeBucket(label=label, total_amount=totals[label]) for label in sorted(totals)]

    def filter_by_date_range(
        self,
        records: Sequence[Any],
        start: Optional[Any] = None,
        end: Optional[Any] = None
    ) -> Sequence[Any]:
        """
        Keep records whose timestamp falls inside an inclusive range.

        Args:
            records: Records to filter
            start: Lower bound, or None for unbounded
            end: Upper bound, or None for unbounded. A bare date covers the
                whole day.

        Returns:
            The input itself when both bounds are None, otherwise a new list
        """
        if start is None and end is None:
            return records

        lower = _bound(start, end_of_day=False) if start is not None else None
        upper = _bound(end, end_of_day=True) if end is not None else None

        selected = []
        for record in records:
            moment = timestamp_or_none(field_value(record, self.date_field), self.date_field)
            if moment is None:
                continue
            if lower is not None and moment < lower:
                continue
            if upper is not None and moment > upper:
                continue
            selected.append(record)

        logger.debug(f"Date filter kept {len(selected)} of {len(records)} records")
        return selected

    def group_totals(self, records: Iterable[Any], field: str, blank_label: str = "Unknown") -> Dict[str, Decimal]:
        """Sum amounts per value of ``field``, sorted by value."""
        totals = defaultdict(Decimal)
        for record in records:
            totals[_label(field_value(record, field), blank_label)] += self._amount(record)
        return {key: totals[key] for key in sorted(totals)}

    def status_breakdown(self, records: Iterable[Any], field: str = "status") -> Dict[str, int]:
        """Count records per status, sorted by status name."""
        counts = Counter(_label(field_value(record, field), "Unknown") for record in records)
        return {status: counts[status] for status in sorted(counts)}

    def _amount(self, record: Any) -> Decimal:
        return amount_or_zero(field_value(record, self.amount_field), self.amount_field)


def period_growth(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """Percent change from previous to current, or None without a baseline."""
    if not previous:
        return None
    change = (Decimal(current) - Decimal(previous)) / abs(Decimal(previous)) * 100
    return change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def _bound(value: Any, end_of_day: bool) -> datetime:
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, str) and len(value.strip()) == 10:
        return _bound(date.fromisoformat(value.strip()), end_of_day)
    return parse_timestamp(value, "date bound")


def _label(value: Any, blank_label: str) -> str:
    if is_blank(value):
        return blank_label
    return value.strip() if isinstance(value, str) else str(value)
