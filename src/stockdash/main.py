"""Command-line entry point."""
import os
import sys
import getpass
import argparse
from datetime import date, datetime, timezone
from pathlib import Path

from stockdash.auth.client import SupabaseAuth
from stockdash.auth.session import AccessPolicy, Session
from stockdash.config.manager import Config, ConfigManager
from stockdash.config.settings import AppSettings
from stockdash.datastore.supabase import SupabaseStore
from stockdash.reports.writer import save_document
from stockdash.services.catalog import CatalogService
from stockdash.services.reports import ReportService
from stockdash.utils.logger import get_logger, get_home_dir, set_log_level
from stockdash.utils.exceptions import (
    StockDashError,
    ConfigError,
    DataFetchError,
    ExportIOError,
    AuthorizationError,
    AuthenticationError
)

logger = get_logger()


def report_command(args, config: Config, settings: AppSettings) -> int:
    """Build a sales or expense report and write it to disk."""
    auth = SupabaseAuth(config.supabase_url, config.supabase_anon_key, settings.datastore_timeout_seconds)
    session = _sign_in(auth, args.email)
    try:
        service = ReportService(
            _store(config, settings, session),
            settings,
            AccessPolicy.from_settings(settings),
            currency_label=config.currency_label
        )
        build = service.sales_report if args.kind == "sales" else service.expense_report
        report = build(session, args.start, args.end, args.granularity)

        try:
            path = save_document(report.document, _export_dir(args, config, settings), report.filename)
        except ExportIOError as e:
            print(f"✗ Could not save report: {e.cause}")
            return 1

        print(f"✓ Saved {report.kind} ({report.summary.count} records) to {path}")
        return 0
    finally:
        auth.sign_out(session)


def summary_command(args, config: Config, settings: AppSettings) -> int:
    """Print dashboard totals for a date range."""
    auth = SupabaseAuth(config.supabase_url, config.supabase_anon_key, settings.datastore_timeout_seconds)
    session = _sign_in(auth, args.email)
    try:
        service = ReportService(_store(config, settings, session), settings, currency_label=config.currency_label)
        overview = service.overview(datetime.now(timezone.utc).date(), args.start, args.end)
        fmt = service.builder.format_currency
        growth = overview.revenue_growth

        print(f"\n{'Total Revenue':<18} {fmt(overview.summary.total_amount)}")
        print(f"{'Total Orders':<18} {overview.summary.count}")
        print(f"{'Total Customers':<18} {overview.summary.unique_entities}")
        print(f"{'Average Sale':<18} {fmt(overview.summary.average_amount)}")
        print(f"{'Growth (MoM)':<18} {'N/A' if growth is None else f'{growth}%'}")

        if overview.monthly:
            print(f"\n{'Month':<10} {'Sales':>16}")
            print("-" * 27)
            for bucket in overview.monthly:
                print(f"{bucket.label:<10} {fmt(bucket.total_amount):>16}")
        return 0
    finally:
        auth.sign_out(session)


def low_stock_command(args, config: Config, settings: AppSettings) -> int:
    """Print products below the restock threshold."""
    auth = SupabaseAuth(config.supabase_url, config.supabase_anon_key, settings.datastore_timeout_seconds)
    session = _sign_in(auth, args.email)
    try:
        alerts = CatalogService(_store(config, settings, session), settings).low_stock_products()
        if not alerts:
            print("No low stock items found.")
            return 0

        print(f"\n{'Level':<9} {'Qty':>5} {'Product':<32} {'SKU':<14} {'Company':<20}")
        print("-" * 84)
        for alert in alerts:
            p = alert.product
            print(f"{alert.level:<9} {p.quantity:>5} {p.name:<32} {p.sku or '-':<14} {p.company_name or '-':<20}")
        return 0
    finally:
        auth.sign_out(session)


def expired_command(args, config: Config, settings: AppSettings) -> int:
    """Print expired products."""
    auth = SupabaseAuth(config.supabase_url, config.supabase_anon_key, settings.datastore_timeout_seconds)
    session = _sign_in(auth, args.email)
    try:
        today = datetime.now(timezone.utc).date()
        items = CatalogService(_store(config, settings, session), settings).expired_products(today)
        if not items:
            print("No expired products found.")
            return 0

        print(f"\n{'Expired On':<12} {'Days':>5} {'Product':<32} {'Category':<20}")
        print("-" * 72)
        for item in items:
            p = item.product
            print(f"{p.expiry_date.isoformat():<12} {item.days_expired:>5} {p.name:<32} {p.category_name or '-':<20}")
        return 0
    finally:
        auth.sign_out(session)


def _load_and_validate_config() -> Config:
    """Load and validate configuration."""
    try:
        config = ConfigManager().load_config()
    except ConfigError as e:
        logger.critical(f"Could not load configuration: {e}")
        print(f"✗ Invalid configuration: {e}")
        sys.exit(1)

    if not config:
        logger.critical("No configuration found. Set SUPABASE_URL and SUPABASE_ANON_KEY or create config.json.")
        sys.exit(1)

    is_valid, message = ConfigManager().validate_config(config)
    if not is_valid:
        logger.critical(f"Invalid configuration: {message}")
        sys.exit(1)

    logger.info("Configuration loaded successfully")
    return config


def _sign_in(auth: SupabaseAuth, email: str) -> Session:
    password = os.getenv("STOCKDASH_PASSWORD") or getpass.getpass(f"Password for {email}: ")
    return auth.sign_in(email, password)


def _store(config: Config, settings: AppSettings, session: Session) -> SupabaseStore:
    return SupabaseStore(
        config.supabase_url,
        config.supabase_anon_key,
        access_token=session.access_token,
        timeout=settings.datastore_timeout_seconds
    )


def _export_dir(args, config: Config, settings: AppSettings) -> Path:
    directory = Path(args.out or config.export_dir or settings.export_dir)
    return directory if directory.is_absolute() else get_home_dir() / directory


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="StockDash inventory and sales reporting")
    parser.add_argument("--email", required=True, help="Account email used to sign in")
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Export a CSV report")
    report.add_argument("kind", choices=["sales", "expenses"])
    report.add_argument("--granularity", choices=["day", "month"], help="Time series period")
    report.add_argument("--out", help="Output directory")

    summary = sub.add_parser("summary", help="Print dashboard totals")

    for command in (report, summary):
        command.add_argument("--start", type=_iso_date, help="First day (YYYY-MM-DD)")
        command.add_argument("--end", type=_iso_date, help="Last day (YYYY-MM-DD)")

    sub.add_parser("low-stock", help="List products to restock")
    sub.add_parser("expired", help="List expired products")
    return parser


COMMANDS = {
    "report": report_command,
    "summary": summary_command,
    "low-stock": low_stock_command,
    "expired": expired_command,
}


def main(argv=None):
    """Main entry point for the StockDash CLI."""
    args = build_parser().parse_args(argv)

    try:
        settings = AppSettings.load()
    except FileNotFoundError as e:
        logger.warning(f"{e}; using built-in defaults")
        settings = AppSettings()
    except ConfigError as e:
        logger.critical(f"Invalid settings: {e}")
        print(f"✗ Invalid settings: {e}")
        sys.exit(1)
    config = _load_and_validate_config()
    set_log_level(config.log_level or settings.log_level)

    try:
        code = COMMANDS[args.command](args, config, settings)
    except AuthenticationError as e:
        print(f"✗ Sign-in failed: {e}")
        code = 1
    except AuthorizationError as e:
        print(f"✗ Not allowed: {e}")
        code = 1
    except DataFetchError as e:
        print(f"✗ Could not load data: {e}")
        code = 1
    except StockDashError as e:
        logger.error(f"Command {args.command} failed: {e}")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
