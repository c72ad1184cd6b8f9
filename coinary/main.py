"""Command-line entry point."""
import argparse
import calendar
import sys
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from coinary.advisor import FinancialAdvisor
from coinary.config import AppSettings, get_settings
from coinary.ledger.aggregator import category_totals, day_totals, top_categories
from coinary.ledger.models import RecordKind, TimeRange, TransactionFilter, parse_date
from coinary.orchestrator import LedgerService, SummaryOrchestrator
from coinary.reminders import ReminderScheduler, ReminderStorage
from coinary.reports import build_monthly_report, write_report_csv
from coinary.store import SqliteRecordStore
from coinary.utils.exceptions import CoinaryError
from coinary.utils.logger import configure_logging, get_logger

logger = get_logger()


def _amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Not an amount: {value}")
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError(f"Amount must be positive: {value}")
    return amount


def _date(value: str) -> datetime:
    moment = parse_date(value)
    if moment is None:
        raise argparse.ArgumentTypeError(f"Not a date (use dd/mm/yyyy or yyyy-mm-dd): {value}")
    return moment


def _print_totals(rows, label: str) -> None:
    print(f"{label:<24} {'Amount':>14}")
    print("-" * 39)
    for key, total in rows:
        print(f"{str(key):<24} {total:>14,.2f}")


def add_income_command(service: LedgerService, args) -> None:
    record = service.add_income(args.amount, args.category, args.date or datetime.now(), args.description)
    print(f"✓ Income saved: {record.amount:,.2f} ({record.category})")


def add_expense_command(service: LedgerService, args) -> None:
    check = service.check_expense(args.amount)
    if check.propose_debt and not args.force:
        if args.as_debt:
            debt = service.create_debt_for_expense(args.amount, args.description or args.category)
            print(f"✓ Debt created instead of expense: {debt.description} ({debt.amount:,.2f})")
            return
        print(
            f"Insufficient balance ({check.balance:,.2f}) for {check.amount:,.2f}. "
            "Use --as-debt to record it as a debt or --force to save it anyway."
        )
        sys.exit(2)

    record = service.add_expense(args.amount, args.category, args.date or datetime.now(), args.description)
    if record.is_ant_expense:
        print(f"⚠ Ant expense habit detected ({record.category})")
    print(f"✓ Expense saved: {record.amount:,.2f} ({record.category})")


def summary_command(orchestrator: SummaryOrchestrator, args) -> None:
    summaries = orchestrator.build(args.month, args.year, args.window)
    print(f"{'Month':<16} {'Income':>14} {'Expense':>14} {'Net':>14}")
    print("-" * 61)
    for s in summaries:
        label = f"{calendar.month_abbr[s.month]} {s.year}"
        print(f"{label:<16} {s.total_income:>14,.2f} {s.total_expense:>14,.2f} {s.net_balance:>14,.2f}")


def week_command(orchestrator: SummaryOrchestrator, args) -> None:
    totals = orchestrator.weekly_summary(args.date or datetime.now())
    if not totals:
        print("No expenses this week.")
        return
    _print_totals(top_categories(totals), "Category")
    print(f"{'Total':<24} {sum(totals.values()):>14,.2f}")


def dashboard_command(orchestrator: SummaryOrchestrator, args) -> None:
    totals = orchestrator.dashboard(TimeRange(args.range))
    print(f"Income:  {totals.total_income:,.2f}")
    print(f"Expense: {totals.total_expense:,.2f}")
    print(f"Balance: {totals.net_balance:,.2f}")
    if totals.expenses_by_category:
        print()
        _print_totals(top_categories(totals.expenses_by_category), "Category")


def categories_command(store: SqliteRecordStore, args) -> None:
    records = store.fetch_month(RecordKind(args.kind), args.month, args.year)
    totals = category_totals(records)
    if not totals:
        print("No data for this month.")
        return
    _print_totals(top_categories(totals, args.top), "Category")


def days_command(store: SqliteRecordStore, args) -> None:
    records = store.fetch_month(RecordKind(args.kind), args.month, args.year)
    totals = day_totals(records)
    if not totals:
        print("No data for this month.")
        return
    _print_totals(totals, "Day")


def report_command(store: SqliteRecordStore, args) -> None:
    report = build_monthly_report(store, args.month, args.year, args.filter)
    if report.is_empty:
        print("No transactions for this period.")
        return

    print(f"{'Date':<12} {'Kind':<8} {'Category':<18} {'Description':<28} {'Amount':>12}")
    print("-" * 82)
    for record in report.transactions:
        moment = record.moment
        print(
            f"{moment.strftime('%d/%m/%Y') if moment else '':<12} {record.kind.value:<8} "
            f"{record.category[:18]:<18} {record.description[:28]:<28} {record.amount:>12,.2f}"
        )
    print(f"\nIncome {report.summary.total_income:,.2f} | Expense {report.summary.total_expense:,.2f} "
          f"| Net {report.summary.net_balance:,.2f}")

    if args.csv:
        path = write_report_csv(report, Path(args.csv))
        print(f"✓ Report written to {path}")


def debts_command(store: SqliteRecordStore, args) -> None:
    debts = store.get_debts()
    if not debts:
        print("No debts.")
        return
    print(f"{'Status':<8} {'Description':<30} {'Creditor':<20} {'Due':<12} {'Remaining':>12} {'Paid %':>7}")
    print("-" * 94)
    for debt in debts:
        status = "paid" if debt.is_paid else "open"
        due = debt.due_date.strftime("%d/%m/%Y") if debt.due_date else ""
        print(
            f"{status:<8} {debt.description[:30]:<30} {debt.creditor[:20]:<20} {due:<12} "
            f"{debt.remaining_balance():>12,.2f} {debt.progress_percentage():>6.0f}%"
        )


def add_debt_command(service: LedgerService, args) -> None:
    debt = service.add_debt(args.amount, args.description, args.creditor, args.due_date)
    print(f"✓ Debt saved: {debt.description} ({debt.amount:,.2f}) id={debt.id}")


def pay_debt_command(service: LedgerService, args) -> None:
    debt = service.pay_debt(args.debt_id, args.amount, from_new_income=args.from_new_income)
    if debt.is_paid:
        print(f"✓ Debt settled: {debt.description}")
    else:
        print(f"✓ Payment registered, remaining {debt.remaining_balance():,.2f}")


def add_goal_command(service: LedgerService, args) -> None:
    goal = service.add_goal(args.name, args.target, args.deadline)
    print(f"✓ Goal saved: {goal.name} ({goal.target_amount:,.2f}) id={goal.id}")


def contribute_command(service: LedgerService, args) -> None:
    goal = service.contribute_to_goal(args.goal_id, args.amount, from_new_income=args.from_new_income)
    if goal.is_completed:
        print(f"✓ Goal reached: {goal.name}")
    else:
        print(f"✓ Contribution saved, {goal.progress_percentage():.0f}% of {goal.name}")


def goals_command(store: SqliteRecordStore, args) -> None:
    goals = store.get_goals()
    if not goals:
        print("No savings goals.")
        return
    print(f"{'Status':<8} {'Goal':<30} {'Saved':>12} {'Target':>12} {'Done %':>7}")
    print("-" * 73)
    for goal in goals:
        status = "done" if goal.is_completed else "open"
        print(
            f"{status:<8} {goal.name[:30]:<30} {goal.current_amount:>12,.2f} "
            f"{goal.target_amount:>12,.2f} {goal.progress_percentage():>6.0f}%"
        )


def reminders_command(storage: ReminderStorage, args) -> None:
    reminders = storage.load()
    if not reminders:
        print("No reminders.")
        return
    for reminder in reminders:
        print(f"{reminder.date_time:<17} {reminder.title}: {reminder.message}")


def advise_command(orchestrator: SummaryOrchestrator, settings: AppSettings, args) -> None:
    advisor = FinancialAdvisor.from_settings(orchestrator, settings)
    print(advisor.ask(" ".join(args.question)))


def _build_parser() -> argparse.ArgumentParser:
    today = datetime.now()
    parser = argparse.ArgumentParser(description="Coinary personal finance ledger")
    parser.add_argument("--config", type=Path, help="Path to config.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("add-income", "Record an income"), ("add-expense", "Record an expense")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("amount", type=_amount)
        sub.add_argument("category")
        sub.add_argument("--date", type=_date, help="Economic date (default: now)")
        sub.add_argument("--description", default="")
        if name == "add-expense":
            sub.add_argument("--force", action="store_true", help="Save even without enough balance")
            sub.add_argument("--as-debt", action="store_true", help="Record as a debt when funds are short")

    def month_args(sub):
        sub.add_argument("--month", type=int, default=today.month)
        sub.add_argument("--year", type=int, default=today.year)

    sub = subparsers.add_parser("summary", help="Rolling monthly income/expense summary")
    month_args(sub)
    sub.add_argument("--window", type=int, help="Months in the window")

    sub = subparsers.add_parser("week", help="Expenses by category for a Monday-Sunday week")
    sub.add_argument("--date", type=_date, help="Any day of the week (default: today)")

    sub = subparsers.add_parser("dashboard", help="Totals for the current day/week/month/year")
    sub.add_argument("--range", choices=[r.value for r in TimeRange], default=TimeRange.WEEK.value)

    for name, help_text in (("categories", "Totals per category"), ("days", "Totals per day of month")):
        sub = subparsers.add_parser(name, help=help_text)
        month_args(sub)
        sub.add_argument("--kind", choices=[k.value for k in RecordKind], default=RecordKind.EXPENSE.value)
        if name == "categories":
            sub.add_argument("--top", type=int, help="Show only the largest N")

    sub = subparsers.add_parser("report", help="Monthly transaction report")
    month_args(sub)
    sub.add_argument("--filter", choices=[f.value for f in TransactionFilter], default=TransactionFilter.ALL.value)
    sub.add_argument("--csv", help="Also write the line items to this CSV file")

    subparsers.add_parser("debts", help="List debts")
    subparsers.add_parser("goals", help="List savings goals")

    sub = subparsers.add_parser("add-debt", help="Record a debt and schedule its reminders")
    sub.add_argument("amount", type=_amount)
    sub.add_argument("description")
    sub.add_argument("creditor")
    sub.add_argument("--due-date", type=_date)

    sub = subparsers.add_parser("pay-debt", help="Register a debt payment")
    sub.add_argument("debt_id")
    sub.add_argument("amount", type=_amount)
    sub.add_argument("--from-new-income", action="store_true", help="Record a matching income first")

    sub = subparsers.add_parser("add-goal", help="Create a savings goal")
    sub.add_argument("name")
    sub.add_argument("target", type=_amount)
    sub.add_argument("--deadline", type=_date)

    sub = subparsers.add_parser("contribute", help="Add money to a savings goal")
    sub.add_argument("goal_id")
    sub.add_argument("amount", type=_amount)
    sub.add_argument("--from-new-income", action="store_true", help="Record a matching income first")
    subparsers.add_parser("reminders", help="List stored reminders")

    sub = subparsers.add_parser("advise", help="Ask the AI advisor")
    sub.add_argument("question", nargs="+")

    return parser


def main(argv=None):
    """Main entry point for the Coinary CLI."""
    args = _build_parser().parse_args(argv)

    try:
        settings = AppSettings.load(args.config) if args.config else get_settings()
        is_valid, message = settings.validate()
        if not is_valid:
            logger.critical(f"Invalid configuration: {message}")
            sys.exit(1)
        configure_logging(settings)

        store = SqliteRecordStore(Path(settings.database_file))
        storage = ReminderStorage(Path(settings.reminders_file))
        service = LedgerService.from_settings(store, settings, ReminderScheduler(storage))
        orchestrator = SummaryOrchestrator.from_settings(store, settings)

        commands = {
            "add-income": lambda: add_income_command(service, args),
            "add-expense": lambda: add_expense_command(service, args),
            "summary": lambda: summary_command(orchestrator, args),
            "week": lambda: week_command(orchestrator, args),
            "dashboard": lambda: dashboard_command(orchestrator, args),
            "categories": lambda: categories_command(store, args),
            "days": lambda: days_command(store, args),
            "report": lambda: report_command(store, args),
            "debts": lambda: debts_command(store, args),
            "goals": lambda: goals_command(store, args),
            "add-debt": lambda: add_debt_command(service, args),
            "pay-debt": lambda: pay_debt_command(service, args),
            "add-goal": lambda: add_goal_command(service, args),
            "contribute": lambda: contribute_command(service, args),
            "reminders": lambda: reminders_command(storage, args),
            "advise": lambda: advise_command(orchestrator, settings, args),
        }
        commands[args.command]()
    except CoinaryError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
