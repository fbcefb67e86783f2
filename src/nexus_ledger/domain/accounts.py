"""Chart of accounts: logical account names mapped to ids and classes."""

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from nexus_ledger.domain.value_objects import AccountClass, PaymentMethod, Side
from nexus_ledger.exceptions import AccountNotFoundError

CASH_AT_BANK = "Cash at Bank"
PETTY_CASH = "Petty Cash"
MOBILE_MONEY = "Mobile Money Account"
ACCOUNTS_RECEIVABLE = "Accounts Receivable"
FIXED_ASSETS = "Fixed Assets"
ACCOUNTS_PAYABLE = "Accounts Payable"
PAYE_PAYABLE = "PAYE Payable"
RSSB_PAYABLE = "RSSB Payable"
DIVIDEND_PAYABLE = "Dividend Payable"
SHARE_CAPITAL = "Share Capital"
RETAINED_EARNINGS = "Retained Earnings"
EQUITY_ADJUSTMENT = "Equity Adjustment"
SHARE_PREMIUM = "Share Premium"
SALES_REVENUE = "Sales Revenue"
SALARIES_AND_WAGES = "Salaries & Wages"
OTHER_EXPENSES = "Other Expenses"

PAYMENT_METHOD_ACCOUNTS: dict[PaymentMethod, str] = {
    PaymentMethod.CASH: PETTY_CASH,
    PaymentMethod.BANK: CASH_AT_BANK,
    PaymentMethod.MOBILE_MONEY: MOBILE_MONEY,
    PaymentMethod.CARD: CASH_AT_BANK,
    PaymentMethod.CHEQUE: CASH_AT_BANK,
}


@dataclass(frozen=True, slots=True)
class AccountChartEntry:
    name: str
    id: str
    account_class: AccountClass

    @property
    def normal_side(self) -> Side:
        return self.account_class.normal_side


_DEFAULT_ACCOUNTS: tuple[tuple[str, str, AccountClass], ...] = (
    ("1001", CASH_AT_BANK, AccountClass.ASSET),
    ("1002", PETTY_CASH, AccountClass.ASSET),
    ("1003", MOBILE_MONEY, AccountClass.ASSET),
    ("1101", ACCOUNTS_RECEIVABLE, AccountClass.ASSET),
    ("1201", "Inventory", AccountClass.ASSET),
    ("1301", FIXED_ASSETS, AccountClass.ASSET),
    ("2001", ACCOUNTS_PAYABLE, AccountClass.LIABILITY),
    ("2101", "VAT Payable", AccountClass.LIABILITY),
    ("2102", PAYE_PAYABLE, AccountClass.LIABILITY),
    ("2103", RSSB_PAYABLE, AccountClass.LIABILITY),
    ("2201", DIVIDEND_PAYABLE, AccountClass.LIABILITY),
    ("2202", "Accrued Expenses", AccountClass.LIABILITY),
    ("3000", SHARE_CAPITAL, AccountClass.EQUITY),
    ("3001", RETAINED_EARNINGS, AccountClass.EQUITY),
    ("3002", "Owner Drawings", AccountClass.EQUITY),
    ("3003", EQUITY_ADJUSTMENT, AccountClass.EQUITY),
    ("3004", SHARE_PREMIUM, AccountClass.EQUITY),
    ("4001", SALES_REVENUE, AccountClass.REVENUE),
    ("4002", "Service Revenue", AccountClass.REVENUE),
    ("4003", "Other Income", AccountClass.REVENUE),
    ("5001", SALARIES_AND_WAGES, AccountClass.EXPENSE),
    ("5002", "Rent Expense", AccountClass.EXPENSE),
    ("5003", "Utilities", AccountClass.EXPENSE),
    ("5004", "Marketing", AccountClass.EXPENSE),
    ("5005", "Office Supplies", AccountClass.EXPENSE),
    ("5006", "Professional Fees", AccountClass.EXPENSE),
    ("5007", "Depreciation", AccountClass.EXPENSE),
    ("5008", OTHER_EXPENSES, AccountClass.EXPENSE),
)


class AccountChart:
    """Immutable lookup from account names (or ids) to chart entries.

    Names are matched case-insensitively. The chart is loaded once at
    startup and only read afterwards.
    """

    def __init__(self, entries: Iterable[AccountChartEntry]) -> None:
        by_id: dict[str, AccountChartEntry] = {}
        by_name: dict[str, AccountChartEntry] = {}
        for entry in entries:
            key = entry.name.strip().casefold()
            if entry.id in by_id:
                raise ValueError(f"Duplicate account id in chart: {entry.id}")
            if key in by_name:
                raise ValueError(f"Duplicate account name in chart: {entry.name}")
            by_id[entry.id] = entry
            by_name[key] = entry
        self._by_id = by_id
        self._by_name = by_name

    def resolve(self, name: str, *, field: str | None = None) -> AccountChartEntry:
        """Resolve an account by name, falling back to id.

        Raises:
            AccountNotFoundError: If neither a name nor an id matches.
        """
        entry = self._by_name.get(name.strip().casefold()) or self._by_id.get(name)
        if entry is None:
            raise AccountNotFoundError(name, field=field)
        return entry

    def get(self, account_id: str) -> AccountChartEntry | None:
        return self._by_id.get(account_id)

    def payment_account(self, method: PaymentMethod) -> AccountChartEntry:
        return self.resolve(PAYMENT_METHOD_ACCOUNTS[method])

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name.strip().casefold() in self._by_name or name in self._by_id

    def __iter__(self) -> Iterator[AccountChartEntry]:
        return iter(sorted(self._by_id.values(), key=lambda e: e.id))

    def __len__(self) -> int:
        return len(self._by_id)

    @classmethod
    def from_json(cls, path: Path) -> "AccountChart":
        """Load a chart from a JSON list of {"id", "name", "class"} objects."""
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(
            AccountChartEntry(
                name=item["name"],
                id=str(item["id"]),
                account_class=AccountClass(item["class"]),
            )
            for item in raw
        )


def default_chart() -> AccountChart:
    return AccountChart(
        AccountChartEntry(name=name, id=account_id, account_class=account_class)
        for account_id, name, account_class in _DEFAULT_ACCOUNTS
    )
