from datetime import date
from decimal import Decimal

import pytest

from nexus_ledger.domain.postings import PostingResult
from nexus_ledger.domain.transactions import (
    CapitalPayload,
    DividendPayload,
    ShareIssuancePayload,
)
from nexus_ledger.domain.value_objects import (
    Money,
    PaymentMethod,
    PaymentStatus,
    Register,
    TransactionKind,
)
from nexus_ledger.repositories.interfaces import HistoryFilter
from nexus_ledger.services.payment_status import PaymentStatusResolver


@pytest.fixture
def build(poster, generator, chart):
    resolver = PaymentStatusResolver()

    def _build(request):
        settlement = resolver.resolve(
            request.amount, request.payment_status, request.paid_amount
        )
        entries = generator.generate(request, settlement, chart)
        return entries, poster.build_updates(request, entries, settlement)

    return _build


def by_register(updates, register):
    return [u for u in updates if u.register == register]


class TestBuildUpdates:
    def test_one_general_ledger_update_per_entry(self, build, make_request):
        entries, updates = build(make_request())

        gl = by_register(updates, Register.GENERAL_LEDGER)
        assert len(gl) == len(entries) == 2
        assert all(u.account_id == u.key for u in gl)

    def test_signed_by_normal_balance(self, build, make_request):
        _, updates = build(
            make_request(
                TransactionKind.CAPITAL_WITHDRAWAL,
                payload=CapitalPayload(shareholder_name="Jane"),
            )
        )

        gl = {u.account_id: u.amount for u in by_register(updates, Register.GENERAL_LEDGER)}
        # Debit to equity lowers it; credit to an asset lowers it.
        assert gl["3000"] == Decimal("-100000.00")
        assert gl["1001"] == Decimal("-100000.00")

    def test_credit_sale_adds_receivable_row(self, build, make_request):
        _, updates = build(
            make_request(
                payment_status=PaymentStatus.UNPAID,
                party_name="Acme",
                due_date=date(2025, 4, 30),
            )
        )

        (receivable,) = by_register(updates, Register.ACCOUNTS_RECEIVABLE)
        assert receivable.key == "Acme"
        assert receivable.amount == Decimal("100000.00")
        assert receivable.due_date == date(2025, 4, 30)
        assert by_register(updates, Register.ACCOUNTS_PAYABLE) == []

    def test_partial_purchase_adds_payable_row(self, build, make_request):
        _, updates = build(
            make_request(
                TransactionKind.PURCHASE,
                amount=Decimal("50000"),
                payment_status=PaymentStatus.PARTIALLY_PAID,
                paid_amount=Decimal("20000"),
                party_name="Supplier X",
                due_date=date(2025, 4, 30),
            )
        )

        (payable,) = by_register(updates, Register.ACCOUNTS_PAYABLE)
        assert payable.key == "Supplier X"
        assert payable.amount == Decimal("30000.00")

    def test_paid_sale_has_no_subsidiary_rows(self, build, make_request):
        _, updates = build(make_request())

        assert all(u.register == Register.GENERAL_LEDGER for u in updates)

    def test_share_issuance_records_shares(self, build, make_request):
        _, updates = build(
            make_request(
                TransactionKind.SHARE_ISSUANCE,
                amount=Decimal("1500000"),
                payload=ShareIssuancePayload(shareholder_name="Jane", shares_allocated=1000),
            )
        )

        (row,) = by_register(updates, Register.CAPITAL)
        assert row.key == "Jane"
        assert row.shares == 1000
        assert row.amount == Decimal("1500000")

    def test_capital_withdrawal_row_is_negative(self, build, make_request):
        _, updates = build(
            make_request(
                TransactionKind.CAPITAL_WITHDRAWAL,
                payload=CapitalPayload(shareholder_name="Jane", shares_allocated=10),
            )
        )

        (row,) = by_register(updates, Register.CAPITAL)
        assert row.amount == Decimal("-100000")
        assert row.shares == -10

    def test_capital_row_uses_posted_amount(self, build, make_request):
        entries, updates = build(
            make_request(
                TransactionKind.CAPITAL_CONTRIBUTION,
                amount=Decimal("1000.005"),
                payload=CapitalPayload(shareholder_name="Jane"),
            )
        )

        (row,) = by_register(updates, Register.CAPITAL)
        assert entries[0].amount == Decimal("1000.01")
        assert row.amount == Decimal("1000.01")

    def test_dividend_rows(self, build, make_request):
        _, declared = build(
            make_request(
                TransactionKind.DIVIDEND_DECLARATION,
                payload=DividendPayload(dividend_reference="FY2024"),
            )
        )
        _, paid = build(
            make_request(
                TransactionKind.DIVIDEND_PAYMENT,
                payload=DividendPayload(shareholder_name="Jane"),
            )
        )

        assert by_register(declared, Register.DIVIDEND)[0].key == "FY2024"
        assert by_register(declared, Register.DIVIDEND)[0].amount == Decimal("100000")
        assert by_register(paid, Register.DIVIDEND)[0].key == "Jane"
        assert by_register(paid, Register.DIVIDEND)[0].amount == Decimal("-100000")


class TestPostAndQuery:
    def _post(self, poster, build, request, key):
        entries, updates = build(request)
        result = PostingResult(
            success=True,
            entries=tuple(entries),
            ledger_updates=tuple(updates),
            idempotency_key=key,
        )
        poster.post(request, entries, updates, result)
        return result

    def test_post_applies_balances(self, poster, build, make_request, store):
        self._post(poster, build, make_request(), "sale-1")

        assert poster.account_balance("Cash at Bank") == Money(Decimal("100000.00"))
        assert poster.account_balance("Sales Revenue") == Money(Decimal("100000.00"))
        assert store.get_result("sale-1").success is True

    def test_post_requires_a_key(self, poster, build, make_request):
        request = make_request()
        entries, updates = build(request)

        with pytest.raises(ValueError):
            poster.post(request, entries, updates, PostingResult(success=True))

    def test_trial_balance_balances(self, poster, build, make_request):
        self._post(poster, build, make_request(), "sale-1")
        self._post(
            poster,
            build,
            make_request(
                TransactionKind.PURCHASE,
                amount=Decimal("40000"),
                payment_status=PaymentStatus.UNPAID,
                party_name="Supplier X",
                due_date=date(2025, 5, 1),
            ),
            "purchase-1",
        )

        rows = poster.trial_balance()

        assert sum(r[2] for r in rows) == sum(r[3] for r in rows)
        names = [r[1] for r in rows]
        assert names == ["Cash at Bank", "Accounts Payable", "Sales Revenue", "Other Expenses"]

    def test_open_items_by_party(self, poster, build, make_request):
        for key, amount in (("s1", "1000"), ("s2", "2500")):
            self._post(
                poster,
                build,
                make_request(
                    amount=Decimal(amount),
                    payment_status=PaymentStatus.UNPAID,
                    party_name="Acme",
                    due_date=date(2025, 6, 1),
                ),
                key,
            )

        (item,) = poster.receivables()
        assert item.party_name == "Acme"
        assert item.amount == Decimal("3500.00")
        assert poster.payables() == []

    def test_capital_and_dividend_registers(self, poster, build, make_request):
        self._post(
            poster,
            build,
            make_request(
                TransactionKind.CAPITAL_CONTRIBUTION,
                payload=CapitalPayload(shareholder_name="Jane", shares_allocated=100),
            ),
            "cap-1",
        )
        self._post(poster, build, make_request(TransactionKind.DIVIDEND_DECLARATION), "div-1")

        assert [r.key for r in poster.capital_register()] == ["Jane"]
        assert [r.key for r in poster.dividend_register()] == ["all shareholders"]

    def test_history_and_summary(self, poster, build, make_request):
        self._post(poster, build, make_request(description="March sale"), "sale-1")
        self._post(
            poster,
            build,
            make_request(
                TransactionKind.EXPENSE,
                amount=Decimal("25000"),
                transaction_date=date(2025, 3, 5),
                payment_method=PaymentMethod.MOBILE_MONEY,
            ),
            "expense-1",
        )

        history = poster.history()
        assert [r.idempotency_key for r in history] == ["expense-1", "sale-1"]
        assert history[1].description == "March sale"
        assert history[1].amount == Decimal("100000")
        sales = poster.history(HistoryFilter(kind=TransactionKind.SALE))
        assert [r.idempotency_key for r in sales] == ["sale-1"]

        summary = poster.summary(as_of=date(2025, 3, 31))
        assert summary.this_month.count == 2
        assert summary.this_month.amount == Decimal("125000")
        assert summary.by_payment_method == {"bank": 1, "mobile_money": 1}
