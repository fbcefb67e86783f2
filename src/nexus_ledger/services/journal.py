"""Posting rules: turn a validated transaction request into journal entries."""

from collections.abc import Callable
from decimal import ROUND_FLOOR, Decimal

from nexus_ledger.domain import accounts as chart_names
from nexus_ledger.domain.accounts import AccountChart, AccountChartEntry
from nexus_ledger.domain.postings import JournalEntry
from nexus_ledger.domain.transactions import (
    AssetPayload,
    CapitalPayload,
    DividendPayload,
    EquityAdjustmentPayload,
    PurchasePayload,
    SalaryPayload,
    SalePayload,
    ShareIssuancePayload,
    TransactionRequest,
    TransferPayload,
)
from nexus_ledger.domain.value_objects import Side, TransactionKind, quantize
from nexus_ledger.exceptions import UnbalancedEntriesError, ValidationError
from nexus_ledger.logging_config import get_logger
from nexus_ledger.services.payment_status import Settlement

logger = get_logger(__name__)

Rule = Callable[[TransactionRequest, Settlement, AccountChart], list[JournalEntry]]


def share_split(
    amount: Decimal, par_value: Decimal, shares_allocated: int | None = None
) -> tuple[int, Decimal, Decimal]:
    """Split share issuance proceeds into (shares, share capital, premium).

    With no explicit allocation the share count is floor(amount / par_value)
    and the remainder is premium.
    """
    if shares_allocated is None:
        shares = int((amount / par_value).to_integral_value(rounding=ROUND_FLOOR))
    else:
        shares = shares_allocated
    capital = par_value * shares
    return shares, capital, amount - capital


def _line(
    account: AccountChartEntry, side: Side, amount: Decimal, memo: str = ""
) -> JournalEntry:
    return JournalEntry(
        account_id=account.id,
        account_name=account.name,
        side=side,
        amount=amount,
        memo=memo,
    )


class JournalEntryGenerator:
    """Maps each transaction kind to its debit/credit rule.

    The rule table must cover every TransactionKind; construction fails
    otherwise. Every generated list is balance-checked before it is
    returned.
    """

    def __init__(
        self,
        decimal_places: int = 2,
        default_par_value: Decimal = Decimal("1000"),
    ) -> None:
        self._places = decimal_places
        self._minor_unit = Decimal(1).scaleb(-decimal_places)
        self._default_par_value = default_par_value
        self._rules: dict[TransactionKind, Rule] = {
            TransactionKind.SALE: self._sale,
            TransactionKind.PURCHASE: self._purchase,
            TransactionKind.EXPENSE: self._purchase,
            TransactionKind.SALARY: self._salary,
            TransactionKind.ASSET_ACQUISITION: self._asset_acquisition,
            TransactionKind.TRANSFER: self._transfer,
            TransactionKind.CAPITAL_CONTRIBUTION: self._capital_contribution,
            TransactionKind.CAPITAL_WITHDRAWAL: self._capital_withdrawal,
            TransactionKind.SHARE_ISSUANCE: self._share_issuance,
            TransactionKind.DIVIDEND_DECLARATION: self._dividend_declaration,
            TransactionKind.DIVIDEND_PAYMENT: self._dividend_payment,
            TransactionKind.EQUITY_ADJUSTMENT: self._equity_adjustment,
        }
        missing = set(TransactionKind) - set(self._rules)
        if missing:
            raise NotImplementedError(
                f"No posting rule for: {sorted(k.value for k in missing)}"
            )

    @property
    def decimal_places(self) -> int:
        return self._places

    @property
    def default_par_value(self) -> Decimal:
        return self._default_par_value

    def generate(
        self,
        request: TransactionRequest,
        settlement: Settlement,
        chart: AccountChart,
    ) -> list[JournalEntry]:
        """Produce the balanced journal entries for a request.

        Raises:
            UnbalancedEntriesError: If the rule output does not balance
            AccountNotFoundError: If a payload names an account not in the chart
        """
        rule = self._rules[request.kind]
        lines = rule(request, settlement, chart)
        return self._finalize(request.kind, lines)

    def _finalize(
        self, kind: TransactionKind, lines: list[JournalEntry]
    ) -> list[JournalEntry]:
        entries = [
            JournalEntry(
                account_id=line.account_id,
                account_name=line.account_name,
                side=line.side,
                amount=quantize(line.amount, self._places),
                memo=line.memo,
            )
            for line in lines
        ]
        entries = [e for e in entries if e.amount != 0]

        debits = sum((e.amount for e in entries if e.is_debit), Decimal("0"))
        credits = sum((e.amount for e in entries if e.is_credit), Decimal("0"))
        drift = debits - credits

        if drift != 0 and entries and abs(drift) <= self._minor_unit:
            last = entries[-1]
            adjusted = last.amount - drift if last.is_debit else last.amount + drift
            if adjusted > 0:
                logger.debug(
                    "rounding_reconciled",
                    kind=kind.value,
                    drift=str(drift),
                )
                entries[-1] = JournalEntry(
                    account_id=last.account_id,
                    account_name=last.account_name,
                    side=last.side,
                    amount=adjusted,
                    memo=last.memo,
                )
                drift = Decimal("0")

        if drift != 0 or not entries or any(e.amount < 0 for e in entries):
            raise UnbalancedEntriesError(kind.value, debits, credits)
        return entries

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _sale(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, SalePayload)
        party = request.party_name or "Customer"
        cash = chart.payment_account(request.payment_method)
        receivable = chart.resolve(chart_names.ACCOUNTS_RECEIVABLE)
        revenue = chart.resolve(payload.revenue_account, field="revenue_account")
        return [
            _line(cash, Side.DEBIT, settlement.cash_amount, f"Cash received - {party}"),
            _line(
                receivable,
                Side.DEBIT,
                settlement.outstanding_amount,
                f"Outstanding balance - {party}",
            ),
            _line(revenue, Side.CREDIT, request.amount, f"Sale to {party}"),
        ]

    def _purchase(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, PurchasePayload)
        party = request.party_name or "Supplier"
        expense = chart.resolve(payload.expense_account, field="expense_account")
        cash = chart.payment_account(request.payment_method)
        payable = chart.resolve(chart_names.ACCOUNTS_PAYABLE)
        return [
            _line(expense, Side.DEBIT, request.amount, f"Purchase from {party}"),
            _line(cash, Side.CREDIT, settlement.cash_amount, f"Payment to {party}"),
            _line(
                payable,
                Side.CREDIT,
                settlement.outstanding_amount,
                f"Amount owed to {party}",
            ),
        ]

    def _salary(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, SalaryPayload)
        wages = chart.resolve(chart_names.SALARIES_AND_WAGES)
        cash = chart.payment_account(request.payment_method)

        if payload.gross_salary is None:
            return [
                _line(wages, Side.DEBIT, request.amount, "Salary expense"),
                _line(cash, Side.CREDIT, request.amount, "Net salary paid"),
            ]

        rssb_total = payload.rssb_employee + payload.rssb_employer
        return [
            _line(
                wages,
                Side.DEBIT,
                payload.gross_salary + payload.rssb_employer,
                "Salary expense including employer contributions",
            ),
            _line(cash, Side.CREDIT, request.amount, "Net salary paid"),
            _line(
                chart.resolve(chart_names.PAYE_PAYABLE),
                Side.CREDIT,
                payload.paye_deduction,
                "PAYE tax withheld",
            ),
            _line(
                chart.resolve(chart_names.RSSB_PAYABLE),
                Side.CREDIT,
                rssb_total,
                "RSSB contributions payable",
            ),
        ]

    def _asset_acquisition(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, AssetPayload)
        asset = chart.resolve(payload.asset_account, field="asset_account")
        cash = chart.payment_account(request.payment_method)
        name = payload.asset_name or "fixed asset"
        return [
            _line(asset, Side.DEBIT, request.amount, f"Acquisition of {name}"),
            _line(cash, Side.CREDIT, request.amount, f"Payment for {name}"),
        ]

    def _transfer(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, TransferPayload)
        source = chart.resolve(payload.from_account or "", field="from_account")
        target = chart.resolve(payload.to_account or "", field="to_account")
        memo = f"Transfer from {source.name} to {target.name}"
        return [
            _line(target, Side.DEBIT, request.amount, memo),
            _line(source, Side.CREDIT, request.amount, memo),
        ]

    def _capital_contribution(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, CapitalPayload)
        cash = chart.payment_account(request.payment_method)
        capital = chart.resolve(chart_names.SHARE_CAPITAL)
        return [
            _line(cash, Side.DEBIT, request.amount, "Capital contribution received"),
            _line(
                capital,
                Side.CREDIT,
                request.amount,
                f"Capital contribution from {payload.shareholder_name}",
            ),
        ]

    def _capital_withdrawal(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, CapitalPayload)
        capital = chart.resolve(chart_names.SHARE_CAPITAL)
        cash = chart.payment_account(request.payment_method)
        return [
            _line(
                capital,
                Side.DEBIT,
                request.amount,
                f"Capital withdrawal by {payload.shareholder_name}",
            ),
            _line(cash, Side.CREDIT, request.amount, "Cash paid for capital withdrawal"),
        ]

    def _share_issuance(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, ShareIssuancePayload)
        par_value = payload.par_value or self._default_par_value
        shares, share_capital, premium = share_split(
            request.amount, par_value, payload.shares_allocated
        )
        if premium < 0:
            raise ValidationError(
                f"{shares} shares at par {par_value} exceed the amount received",
                field="shares_allocated",
                error_code="SHARES_BELOW_PAR",
            )
        cash = chart.payment_account(request.payment_method)
        return [
            _line(cash, Side.DEBIT, request.amount, "Share issuance proceeds"),
            _line(
                chart.resolve(chart_names.SHARE_CAPITAL),
                Side.CREDIT,
                share_capital,
                f"{shares} shares issued at par value",
            ),
            _line(
                chart.resolve(chart_names.SHARE_PREMIUM),
                Side.CREDIT,
                premium,
                "Share premium on issuance",
            ),
        ]

    def _dividend_declaration(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        assert isinstance(request.payload, DividendPayload)
        return [
            _line(
                chart.resolve(chart_names.RETAINED_EARNINGS),
                Side.DEBIT,
                request.amount,
                "Dividend declared",
            ),
            _line(
                chart.resolve(chart_names.DIVIDEND_PAYABLE),
                Side.CREDIT,
                request.amount,
                "Dividend payable to shareholders",
            ),
        ]

    def _dividend_payment(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        assert isinstance(request.payload, DividendPayload)
        cash = chart.payment_account(request.payment_method)
        return [
            _line(
                chart.resolve(chart_names.DIVIDEND_PAYABLE),
                Side.DEBIT,
                request.amount,
                "Dividend payment made",
            ),
            _line(cash, Side.CREDIT, request.amount, "Cash paid for dividends"),
        ]

    def _equity_adjustment(
        self, request: TransactionRequest, settlement: Settlement, chart: AccountChart
    ) -> list[JournalEntry]:
        payload = request.payload
        assert isinstance(payload, EquityAdjustmentPayload)
        source = chart.resolve(payload.from_account, field="from_account")
        target = chart.resolve(payload.to_account, field="to_account")
        memo = f"Equity adjustment: {payload.adjustment_type}"
        return [
            _line(target, Side.DEBIT, request.amount, memo),
            _line(source, Side.CREDIT, request.amount, memo),
        ]
