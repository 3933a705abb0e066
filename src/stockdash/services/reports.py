"""Report assembly: DataStore snapshot -> totals, series and export document.

Each call fetches a fresh snapshot, so overlapping reports never share
state. DataStore failures propagate as DataFetchError; nothing is retried.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from stockdash.auth.session import Session, AccessPolicy
from stockdash.config.settings import AppSettings
from stockdash.datastore.base import DataStore, OrderBy
from stockdash.records.models import Order, Expense, SummaryStats, TimeBucket
from stockdash.records.schemas import OrderSchema, ExpenseSchema, parse_rows
from stockdash.reports.aggregator import ReportAggregator, period_growth
from stockdash.reports.export import (
    ExportDocumentBuilder,
    TableSection,
    KeyValueSection,
    Column,
    Metric,
    summary_section,
    series_section,
    export_filename
)
from stockdash.utils.logger import get_logger

logger = get_logger()

ORDER_COLUMNS = [
    Column("Order Number", "order_number"),
    Column("Customer", "customer_name"),
    Column("Customer Email", "customer_email"),
    Column("Status", "status"),
    Column("Amount", "amount", "currency"),
    Column("Created At", "created_at", "timestamp"),
]

EXPENSE_COLUMNS = [
    Column("Reference", "reference_number"),
    Column("Title", "title"),
    Column("Category", "category"),
    Column("Vendor", "vendor"),
    Column("Description", "description"),
    Column("Amount", "amount", "currency"),
    Column("Date", "created_at", "day"),
]


@dataclass
class Report:
    """Built report; ``document`` stays available if saving fails."""
    kind: str
    summary: SummaryStats
    buckets: List[TimeBucket]
    document: str
    filename: str
    start: Optional[Any] = None
    end: Optional[Any] = None


@dataclass
class DashboardOverview:
    """Figures for the dashboard cards and chart."""
    summary: SummaryStats
    monthly: List[TimeBucket]
    status_counts: dict = field(default_factory=dict)
    revenue_growth: Optional[Any] = None


class ReportService:
    """Builds sales and expense reports for the Presenter."""

    def __init__(
        self,
        store: DataStore,
        settings: AppSettings,
        policy: Optional[AccessPolicy] = None,
        currency_label: Optional[str] = None
    ):
        self.store = store
        self.settings = settings
        self.policy = policy or AccessPolicy.from_settings(settings)
        self.builder = ExportDocumentBuilder(currency_label or settings.currency_label)
        self.orders = ReportAggregator(group_field="customer_name")
        self.expenses = ReportAggregator(group_field="vendor")

    def fetch_orders(self, start: Optional[Any] = None, end: Optional[Any] = None) -> List[Order]:
        """Orders in the range, newest first."""
        rows = self.store.query("orders", order_by=OrderBy("created_at", ascending=False))
        orders = parse_rows(OrderSchema, rows, "orders", strict=False)
        return list(self.orders.filter_by_date_range(orders, start, end))

    def fetch_expenses(self, start: Optional[Any] = None, end: Optional[Any] = None) -> List[Expense]:
        """Expenses in the range, newest first."""
        rows = self.store.query("expenses", order_by=OrderBy("created_at", ascending=False))
        expenses = parse_rows(ExpenseSchema, rows, "expenses", strict=False)
        return list(self.expenses.filter_by_date_range(expenses, start, end))

    def overview(self, today: date, start: Optional[Any] = None, end: Optional[Any] = None) -> DashboardOverview:
        """Totals, monthly series, status counts and month-over-month growth."""
        orders = self.fetch_orders(start, end)
        monthly = self.orders.bucket_by_period(orders, "month")
        return DashboardOverview(
            summary=self.orders.compute_summary(orders),
            monthly=monthly,
            status_counts=self.orders.status_breakdown(orders),
            revenue_growth=month_over_month(monthly, today)
        )

    def sales_report(
        self,
        session: Session,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
        granularity: Optional[str] = None,
        today: Optional[date] = None
    ) -> Report:
        """
        Build the downloadable sales report.

        Raises:
            AuthorizationError: session may not download reports
            DataFetchError: orders could not be fetched
        """
        self.policy.require(self.policy.can_download_reports, session, "download reports")
        granularity = granularity or self.settings.default_granularity
        today = today or datetime.now(timezone.utc).date()

        orders = self.fetch_orders(start, end)
        stats = self.orders.compute_summary(orders)
        buckets = self.orders.bucket_by_period(orders, granularity)
        status_counts = self.orders.status_breakdown(orders)
        growth = month_over_month(self.orders.bucket_by_period(orders, "month"), today)

        sections = [
            summary_section(
                stats,
                total_label="Total Revenue",
                count_label="Total Orders",
                entity_label="Total Customers",
                average_label="Average Sale",
                extra=[Metric("Growth Rate (MoM)", growth, "percent")]
            ),
            KeyValueSection(
                title="Orders by Status",
                metrics=[Metric(status, count, "count") for status, count in status_counts.items()],
                headers=("Status", "Orders")
            ),
            TableSection(title="Orders", columns=ORDER_COLUMNS, rows=orders),
            series_section(buckets, f"Sales by {granularity.title()}", granularity.title()),
        ]
        logger.info(f"Sales report: {stats.count} orders, {len(buckets)} {granularity} buckets")
        return self._report("sales_report", sections, stats, buckets, start, end, today)

    def expense_report(
        self,
        session: Session,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
        granularity: Optional[str] = None,
        today: Optional[date] = None
    ) -> Report:
        """Build the downloadable expense report."""
        self.policy.require(self.policy.can_download_reports, session, "download reports")
        granularity = granularity or self.settings.default_granularity

        expenses = self.fetch_expenses(start, end)
        stats = self.expenses.compute_summary(expenses)
        buckets = self.expenses.bucket_by_period(expenses, granularity)
        by_category = self.expenses.group_totals(expenses, "category")

        sections = [
            summary_section(
                stats,
                total_label="Total Expenses",
                count_label="Expense Count",
                entity_label="Vendors",
                average_label="Average Expense"
            ),
            KeyValueSection(
                title="Expenses by Category",
                metrics=[Metric(category, total, "currency") for category, total in by_category.items()],
                headers=("Category", "Total")
            ),
            TableSection(title="Expenses", columns=EXPENSE_COLUMNS, rows=expenses),
            series_section(buckets, f"Expenses by {granularity.title()}", granularity.title()),
        ]
        logger.info(f"Expense report: {stats.count} expenses, {len(buckets)} {granularity} buckets")
        return self._report("expense_report", sections, stats, buckets, start, end, today)

    def _report(self, kind, sections, stats, buckets, start, end, today) -> Report:
        return Report(
            kind=kind,
            summary=stats,
            buckets=buckets,
            document=self.builder.build_document(sections),
            filename=export_filename(kind, start, end, on=today),
            start=start,
            end=end
        )


def month_over_month(monthly: List[TimeBucket], today: date):
    """Growth of this month's total over last month's, in percent."""
    current_label = today.strftime("%Y-%m")
    previous_month = date(today.year - 1, 12, 1) if today.month == 1 else date(today.year, today.month - 1, 1)
    totals = {bucket.label: bucket.total_amount for bucket in monthly}
    return period_growth(totals.get(current_label, 0), totals.get(previous_month.strftime("%Y-%m"), 0))
