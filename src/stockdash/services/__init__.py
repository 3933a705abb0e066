"""Application services used by the Presenter."""
from .reports import ReportService, Report, DashboardOverview, month_over_month
from .catalog import CatalogService, ORDER_STATUSES
from .users import UserAdminService

__all__ = [
    "ReportService",
    "Report",
    "DashboardOverview",
    "month_over_month",
    "CatalogService",
    "ORDER_STATUSES",
    "UserAdminService"
]
