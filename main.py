"""
Main module for the budget cycle command-line interface.

This module wires the engine to a household data file:
1. Loads configuration and sets up logging
2. Reads the household YAML file
3. Resolves, opens and closes budget periods and manages exceptions
4. Writes updated people back to the household file
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from budget_exceptions import (
    add_exception,
    create_budget_exception,
    exception_window,
    find_active_exception,
    prune_stale_exceptions,
    remove_exception,
    resolve_active_period,
)
from business_days import previous_business_day
from config_manager import get_period_setting, load_config
from exceptions import FinanceAppError
from holidays_calendar import HolidayCalendar, calendar_from_config, holidays_in_year, is_holiday
from household import Household, load_household, save_household
from models import Person
from period_ledger import (
    available_periods_for_selection,
    close_period,
    current_open_period,
    delete_period,
    open_period,
)
from report_generator import ReportGenerator
from spending import budget_statuses, period_totals
from utils import parse_iso_date, resolve_household_path, resolve_log_path

# Configure module-level logger
logger = logging.getLogger(__name__)

_DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: dict) -> None:
    """
    Configure logging based on config settings.

    Args:
        config: Configuration dictionary with logging settings
    """
    log_config = config.get("logging") or {}
    level_name = str(log_config.get("level") or "INFO").upper()
    log_level = getattr(logging, level_name, None)
    if not isinstance(log_level, int):
        logger.warning(f"Invalid log level '{level_name}', defaulting to INFO")
        log_level = logging.INFO
    log_format = log_config.get("format") or _DEFAULT_LOG_FORMAT
    log_file = log_config.get("file")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        try:
            log_path = resolve_log_path(log_file)
        except OSError as exc:
            raise RuntimeError(f"Unable to prepare log file path '{log_file}': {exc}") from exc
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers,
        force=True
    )


def _iso_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return parse_iso_date(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Household budget period manager",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--data",
        "-d",
        type=str,
        help="Path to household data file (default: data.household_file from config)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    period_parser = subparsers.add_parser("period", help="Show the active budget period of a person")
    period_parser.add_argument("--person", "-p", required=True, help="Person ID")
    period_parser.add_argument("--date", type=_iso_date, help="Reference date (default: today)")

    periods_parser = subparsers.add_parser("periods", help="List completed periods and the current one")
    periods_parser.add_argument("--person", "-p", required=True, help="Person ID")
    periods_parser.add_argument("--date", type=_iso_date, help="Reference date (default: today)")

    open_parser = subparsers.add_parser("open", help="Open a new budget period")
    open_parser.add_argument("--person", "-p", required=True, help="Person ID")
    open_parser.add_argument("--start", type=_iso_date, required=True, help="Period start date")

    close_parser = subparsers.add_parser("close", help="Close the current period and roll over")
    close_parser.add_argument("--person", "-p", required=True, help="Person ID")
    close_parser.add_argument("--end", type=_iso_date, help="Period end date (default: today)")

    delete_parser = subparsers.add_parser("delete-period", help="Delete a tracked period")
    delete_parser.add_argument("--person", "-p", required=True, help="Person ID")
    delete_parser.add_argument("--start", type=_iso_date, required=True, help="Start date of the period")

    exception_parser = subparsers.add_parser("exception", help="Manage budget period exceptions")
    exception_sub = exception_parser.add_subparsers(dest="exception_action", required=True)

    exc_add = exception_sub.add_parser("add", help="Declare an exception")
    exc_add.add_argument("--person", "-p", required=True, help="Person ID")
    exc_add.add_argument("--date", type=_iso_date, required=True, help="Trigger date")
    exc_add.add_argument("--reason", type=str, help="Optional reason")

    exc_list = exception_sub.add_parser("list", help="List exceptions and their windows")
    exc_list.add_argument("--person", "-p", required=True, help="Person ID")
    exc_list.add_argument("--date", type=_iso_date, help="Reference date (default: today)")

    exc_remove = exception_sub.add_parser("remove", help="Remove an exception")
    exc_remove.add_argument("--person", "-p", required=True, help="Person ID")
    exc_remove.add_argument("--id", required=True, help="Exception ID")

    exc_prune = exception_sub.add_parser("prune", help="Remove stale exceptions")
    exc_prune.add_argument("--person", "-p", help="Person ID (default: everyone)")
    exc_prune.add_argument("--now", type=_iso_date, help="Reference date (default: today)")

    status_parser = subparsers.add_parser("status", help="Show budget spend in the active period")
    status_parser.add_argument("--person", "-p", required=True, help="Person ID")
    status_parser.add_argument("--date", type=_iso_date, help="Reference date (default: today)")

    holidays_parser = subparsers.add_parser("holidays", help="List holidays of a year")
    holidays_parser.add_argument("--year", type=int, default=date.today().year, help="Calendar year")

    return parser


def _save_person(household: Household, person: Person, data_path: Path) -> Household:
    updated = household.with_person(person)
    save_household(updated, data_path)
    return updated


def handle_period_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Print the active period of a person."""
    household = load_household(data_path)
    person = household.get_person(args.person)
    reference = args.date or date.today()
    active = resolve_active_period(
        person, reference, calendar, get_period_setting(config, "fallback_window_days")
    )
    print(ReportGenerator().format_active_period(person, active))
    return 0


def handle_periods_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Print the period history of a person, newest first."""
    household = load_household(data_path)
    person = household.get_person(args.person)
    periods = available_periods_for_selection(
        person, args.date or date.today(), calendar, get_period_setting(config, "fallback_window_days")
    )
    report = ReportGenerator()
    print(report.render_table(report.period_history_frame(periods), "No periods tracked."))
    return 0


def handle_open_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Open a period for a person."""
    household = load_household(data_path)
    person = household.get_person(args.person)
    updated = open_period(person, args.start)
    if updated is person:
        print(f"No change: period starting {args.start.isoformat()} not opened")
        return 0
    _save_person(household, updated, data_path)
    print(f"Opened period starting {args.start.isoformat()} for '{person.id}'")
    return 0


def handle_close_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Close the current period of a person and open the next one."""
    household = load_household(data_path)
    person = household.get_person(args.person)

    end_date = args.end or date.today()
    if is_holiday(end_date, calendar):
        adjusted = previous_business_day(end_date, calendar)
        print(f"End date {end_date.isoformat()} is not a business day; using {adjusted.isoformat()}")
        end_date = adjusted

    updated = close_period(person, end_date, calendar)
    if updated is person:
        print("No change: no period could be closed", file=sys.stderr)
        return 1

    _save_person(household, updated, data_path)
    current = current_open_period(updated)
    print(f"Closed period for '{person.id}' on {end_date.isoformat()}")
    if current is not None:
        print(f"Next period starts {current.start_date.isoformat()}")
    return 0


def handle_delete_period_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Delete a period from a person's ledger."""
    household = load_household(data_path)
    person = household.get_person(args.person)
    updated = delete_period(person, args.start)
    if updated is person:
        print(f"No period starting {args.start.isoformat()}", file=sys.stderr)
        return 1
    _save_person(household, updated, data_path)
    print(f"Deleted period starting {args.start.isoformat()}")
    return 0


def _prune_targets(household: Household, person_id: Optional[str]) -> List:
    if person_id:
        return [household.get_person(person_id)]
    return list(household.people.values())


def handle_exception_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Add, list, remove or prune exceptions."""
    household = load_household(data_path)
    retention_days = get_period_setting(config, "exception_retention_days")

    if args.exception_action == "prune":
        now = args.now or date.today()
        total_removed = 0
        for person in _prune_targets(household, args.person):
            pruned = prune_stale_exceptions(person, now, retention_days)
            total_removed += len(person.exceptions) - len(pruned.exceptions)
            household = household.with_person(pruned)
        save_household(household, data_path)
        print(f"Removed {total_removed} stale exception(s)")
        return 0

    person = household.get_person(args.person)

    if args.exception_action == "add":
        person = prune_stale_exceptions(person, date.today(), retention_days)
        exception = create_budget_exception(args.date, args.reason)
        _save_person(household, add_exception(person, exception), data_path)
        if person.cycle_start_day is not None:
            window = exception_window(person.cycle_start_day, exception, calendar)
            print(f"Added exception {exception.id}: {window.start.isoformat()} to {window.end.isoformat()}")
        else:
            print(f"Added exception {exception.id} (no cycle start day configured)")
        return 0

    if args.exception_action == "remove":
        if not any(e.id == args.id for e in person.exceptions):
            print(f"Exception '{args.id}' not found", file=sys.stderr)
            return 1
        _save_person(household, remove_exception(person, args.id), data_path)
        print(f"Removed exception {args.id}")
        return 0

    # list
    if not person.exceptions:
        print("No exceptions.")
        return 0
    active = find_active_exception(person, args.date or date.today(), calendar)
    print(f"{'ID':<22} {'Trigger':<12} {'Window':<26} {'Active':<7} Reason")
    print("-" * 90)
    for exception in sorted(person.exceptions, key=lambda e: e.trigger_date, reverse=True):
        if person.cycle_start_day is not None:
            window = exception_window(person.cycle_start_day, exception, calendar)
            window_text = f"{window.start.isoformat()} to {window.end.isoformat()}"
        else:
            window_text = "n/a"
        marker = "yes" if active is not None and active.id == exception.id else ""
        print(f"{exception.id:<22} {exception.trigger_date.isoformat():<12} {window_text:<26} {marker:<7} {exception.reason or ''}")
    return 0


def handle_status_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Print budget spend within the active period of a person."""
    household = load_household(data_path)
    person = household.get_person(args.person)
    active = resolve_active_period(
        person, args.date or date.today(), calendar, get_period_setting(config, "fallback_window_days")
    )
    budgets = household.budgets_for(person.id)
    statuses = budget_statuses(budgets, household.transactions, active, household.account_members)
    totals = period_totals(budgets, household.transactions, active, household.account_members, person.id)

    report = ReportGenerator()
    print(report.format_active_period(person, active))
    print(report.render_table(report.budget_status_frame(statuses), "No budgets for this person."))
    print(report.format_period_totals(totals))
    return 0


def handle_holidays_command(args: argparse.Namespace, config: dict, data_path: Path, calendar: HolidayCalendar) -> int:
    """Print the holidays of a year."""
    for holiday in holidays_in_year(args.year, calendar):
        print(f"{holiday.isoformat()}  {holiday.strftime('%A')}")
    return 0


_HANDLERS = {
    "period": handle_period_command,
    "periods": handle_periods_command,
    "open": handle_open_command,
    "close": handle_close_command,
    "delete-period": handle_delete_period_command,
    "exception": handle_exception_command,
    "status": handle_status_command,
    "holidays": handle_holidays_command,
}


def _resolve_paths(args: argparse.Namespace) -> Tuple[dict, Path]:
    config = load_config(Path(args.config))
    data_path = Path(args.data) if args.data else resolve_household_path(config)
    return config, data_path


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config, data_path = _resolve_paths(args)
    except FinanceAppError as e:
        # Logging is not configured yet
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(config)

    try:
        calendar = calendar_from_config(config)
        return _HANDLERS[args.command](args, config, data_path, calendar)
    except FinanceAppError as e:
        logger.error(f"Command '{args.command}' failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
