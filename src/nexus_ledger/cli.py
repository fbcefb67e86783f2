"""Command-line interface for Nexus Ledger."""

import argparse
import json
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

from nexus_ledger import __version__
from nexus_ledger.config import Settings, StoreType, get_settings
from nexus_ledger.container import Container
from nexus_ledger.domain.value_objects import TransactionKind
from nexus_ledger.exceptions import NexusLedgerError
from nexus_ledger.logging_config import configure_logging
from nexus_ledger.repositories.interfaces import HistoryFilter, TransactionSummary


def get_db_path(args: argparse.Namespace) -> Path:
    """Database path from --database, falling back to the configured path."""
    database = getattr(args, "database", None)
    return Path(database) if database else get_settings().sqlite_path


def create_container(db_path: Path) -> Container:
    """Create a container backed by the SQLite ledger store at db_path."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    settings: Settings = get_settings().model_copy(
        update={"store_type": StoreType.SQLITE, "sqlite_path": db_path}
    )
    return Container(settings=settings)


def _open_existing(args: argparse.Namespace) -> Container | None:
    db_path = get_db_path(args)
    if not db_path.exists():
        print(f"Error: Database not found at {db_path}")
        print("Run 'nexus-ledger post FILE' to create it")
        return None
    return create_container(db_path)


def cmd_post(args: argparse.Namespace) -> int:
    """Post the transaction request(s) in a JSON file."""
    file_path = Path(args.file)
    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        return 1

    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {file_path}: {e}")
        return 1

    requests = data if isinstance(data, list) else [data]
    with create_container(get_db_path(args)) as container:
        try:
            results = [container.processor.process_raw(item) for item in requests]
        except NexusLedgerError as e:
            print(f"Error: {e.message}")
            return 1

    payload = [r.to_dict() for r in results]
    print(json.dumps(payload if isinstance(data, list) else payload[0], indent=2))
    return 0 if all(r.success for r in results) else 1


def cmd_balances(args: argparse.Namespace) -> int:
    """Show the trial balance."""
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        rows = container.poster.trial_balance()
        if not rows:
            print("No balances posted")
            return 0

        print(f"{'Account':<8} {'Name':<28} {'Debit':>16} {'Credit':>16}")
        print("-" * 71)
        for account_id, name, debit, credit in rows:
            debit_str = f"{debit:,.2f}" if debit else ""
            credit_str = f"{credit:,.2f}" if credit else ""
            print(f"{account_id:<8} {name:<28} {debit_str:>16} {credit_str:>16}")
        print("-" * 71)
        total_debit = sum(row[2] for row in rows)
        total_credit = sum(row[3] for row in rows)
        print(f"{'Total':<37} {total_debit:>16,.2f} {total_credit:>16,.2f}")
    return 0


def _print_open_items(args: argparse.Namespace, receivables: bool) -> int:
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        items = (
            container.poster.receivables() if receivables else container.poster.payables()
        )
        label = "receivables" if receivables else "payables"
        if not items:
            print(f"No open {label}")
            return 0

        print(f"{'Party':<30} {'Due':<12} {'Amount':>16}")
        print("-" * 60)
        for item in items:
            due = item.due_date.isoformat() if item.due_date else "-"
            print(f"{item.party_name:<30} {due:<12} {item.amount:>16,.2f}")
        print(f"Total {label}: {sum(i.amount for i in items):,.2f}")
    return 0


def cmd_receivables(args: argparse.Namespace) -> int:
    """Show open receivables by customer."""
    return _print_open_items(args, receivables=True)


def cmd_payables(args: argparse.Namespace) -> int:
    """Show open payables by supplier."""
    return _print_open_items(args, receivables=False)


def cmd_history(args: argparse.Namespace) -> int:
    """Show posted transactions, newest first, or a summary of them."""
    container = _open_existing(args)
    if container is None:
        return 1

    with container:
        if args.summary:
            _print_summary(container.poster.summary())
            return 0

        filters = HistoryFilter(
            kind=TransactionKind(args.kind) if args.kind else None,
            date_from=args.date_from,
            date_to=args.date_to,
            amount_min=args.amount_min,
            amount_max=args.amount_max,
        )
        records = container.poster.history(filters)
        if not records:
            print("No transactions found")
            return 0

        print(f"{'Date':<12} {'Kind':<22} {'Method':<14} {'Amount':>16}  Description")
        print("-" * 90)
        for record in records:
            print(
                f"{record.transaction_date.isoformat():<12} {record.kind.value:<22} "
                f"{record.payment_method.value:<14} {record.amount:>16,.2f}  "
                f"{record.description}"
            )
        print(f"Total: {len(records)} transactions")
    return 0


def _print_summary(summary: TransactionSummary) -> None:
    print(f"{'Period':<12} {'Count':>8} {'Amount':>18}")
    print("-" * 40)
    for label, period in (
        ("All time", summary.total),
        ("This year", summary.this_year),
        ("This month", summary.this_month),
    ):
        print(f"{label:<12} {period.count:>8} {period.amount:>18,.2f}")

    if summary.by_kind:
        print("\nBy kind:")
        for kind, count in sorted(summary.by_kind.items()):
            print(f"  {kind:<24} {count:>6}")
    if summary.by_payment_method:
        print("\nBy payment method:")
        for method, count in sorted(summary.by_payment_method.items()):
            print(f"  {method:<24} {count:>6}")


def cmd_tax_categories(args: argparse.Namespace) -> int:
    """List the configured tax categories."""
    from nexus_ledger.services.tax_classifier import InMemoryTaxCategoryProvider

    categories = InMemoryTaxCategoryProvider().all_categories()
    print(f"{'Code':<28} {'Deductible':<11} Label")
    print("-" * 80)
    for category in categories:
        deductible = "yes" if category.deductible else "no"
        print(f"{category.code:<28} {deductible:<11} {category.label}")
        if getattr(args, "localized", False):
            print(f"{'':<40} {category.label_localized}")
    print(f"Total: {len(categories)} categories")
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"Nexus Ledger v{__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="nexus-ledger",
        description="Nexus Ledger - Double-entry transaction posting engine",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # post command
    post_parser = subparsers.add_parser(
        "post", help="Post transaction requests from a JSON file"
    )
    post_parser.add_argument("file", help="JSON file with one request or a list")
    post_parser.set_defaults(func=cmd_post)

    # balances command
    balances_parser = subparsers.add_parser("balances", help="Show the trial balance")
    balances_parser.set_defaults(func=cmd_balances)

    # receivables / payables commands
    receivables_parser = subparsers.add_parser(
        "receivables", help="Show open receivables by customer"
    )
    receivables_parser.set_defaults(func=cmd_receivables)

    payables_parser = subparsers.add_parser(
        "payables", help="Show open payables by supplier"
    )
    payables_parser.set_defaults(func=cmd_payables)

    # history command
    history_parser = subparsers.add_parser(
        "history", help="Show posted transactions, newest first"
    )
    history_parser.add_argument(
        "--kind", choices=[k.value for k in TransactionKind], help="Only this kind"
    )
    history_parser.add_argument(
        "--from", dest="date_from", type=date.fromisoformat, help="Earliest date (YYYY-MM-DD)"
    )
    history_parser.add_argument(
        "--to", dest="date_to", type=date.fromisoformat, help="Latest date (YYYY-MM-DD)"
    )
    history_parser.add_argument("--min", dest="amount_min", type=Decimal, help="Minimum amount")
    history_parser.add_argument("--max", dest="amount_max", type=Decimal, help="Maximum amount")
    history_parser.add_argument(
        "--summary", action="store_true", help="Show counts and totals instead"
    )
    history_parser.set_defaults(func=cmd_history)

    # tax-categories command
    tax_parser = subparsers.add_parser(
        "tax-categories", help="List expense tax categories"
    )
    tax_parser.add_argument(
        "--localized", action="store_true", help="Also show Kinyarwanda labels"
    )
    tax_parser.set_defaults(func=cmd_tax_categories)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(get_settings(), stream=sys.stderr)

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
