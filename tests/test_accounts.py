import json

import pytest

from nexus_ledger.domain.accounts import (
    ACCOUNTS_RECEIVABLE,
    PAYMENT_METHOD_ACCOUNTS,
    AccountChart,
    AccountChartEntry,
    default_chart,
)
from nexus_ledger.domain.value_objects import AccountClass, PaymentMethod, Side
from nexus_ledger.exceptions import AccountNotFoundError


class TestDefaultChart:
    def test_contains_core_accounts(self, chart):
        for name in (
            "Cash at Bank",
            "Petty Cash",
            "Mobile Money Account",
            "Accounts Receivable",
            "Accounts Payable",
            "Share Capital",
            "Share Premium",
            "Retained Earnings",
            "Dividend Payable",
            "Sales Revenue",
        ):
            assert name in chart

    def test_ids_are_sorted_on_iteration(self, chart):
        ids = [entry.id for entry in chart]

        assert ids == sorted(ids)
        assert len(chart) == len(ids)

    def test_equity_codes(self, chart):
        assert chart.resolve("Share Capital").id == "3000"
        assert chart.resolve("Retained Earnings").id == "3001"
        assert chart.resolve("Share Premium").id == "3004"
        assert chart.resolve(ACCOUNTS_RECEIVABLE).id == "1101"

    def test_every_payment_method_maps_to_an_asset(self, chart):
        for method in PaymentMethod:
            account = chart.payment_account(method)
            assert account.account_class == AccountClass.ASSET

    def test_payment_method_mapping(self, chart):
        assert chart.payment_account(PaymentMethod.CASH).name == "Petty Cash"
        assert chart.payment_account(PaymentMethod.BANK).name == "Cash at Bank"
        assert chart.payment_account(PaymentMethod.MOBILE_MONEY).name == "Mobile Money Account"
        assert set(PAYMENT_METHOD_ACCOUNTS) == set(PaymentMethod)


class TestResolve:
    def test_resolves_case_insensitively(self, chart):
        assert chart.resolve("  sales revenue ").name == "Sales Revenue"

    def test_resolves_by_id(self, chart):
        assert chart.resolve("4001").name == "Sales Revenue"

    def test_unknown_account_raises_with_field(self, chart):
        with pytest.raises(AccountNotFoundError) as exc_info:
            chart.resolve("Petty Crypto", field="from_account")

        assert exc_info.value.field == "from_account"
        assert exc_info.value.account == "Petty Crypto"

    def test_get_returns_none_for_unknown_id(self, chart):
        assert chart.get("9999") is None
        assert chart.get("1001").name == "Cash at Bank"

    def test_contains_rejects_non_strings(self, chart):
        assert 1001 not in chart


class TestChartEntries:
    @pytest.mark.parametrize(
        "account_class,side",
        [
            (AccountClass.ASSET, Side.DEBIT),
            (AccountClass.EXPENSE, Side.DEBIT),
            (AccountClass.LIABILITY, Side.CREDIT),
            (AccountClass.EQUITY, Side.CREDIT),
            (AccountClass.REVENUE, Side.CREDIT),
        ],
    )
    def test_normal_side(self, account_class, side):
        entry = AccountChartEntry("X", "1", account_class)

        assert entry.normal_side == side

    def test_duplicate_id_rejected(self):
        with pytest.raises(ValueError, match="Duplicate account id"):
            AccountChart(
                [
                    AccountChartEntry("Cash", "1", AccountClass.ASSET),
                    AccountChartEntry("Bank", "1", AccountClass.ASSET),
                ]
            )

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError, match="Duplicate account name"):
            AccountChart(
                [
                    AccountChartEntry("Cash", "1", AccountClass.ASSET),
                    AccountChartEntry("CASH", "2", AccountClass.ASSET),
                ]
            )


class TestFromJson:
    def test_loads_chart_file(self, tmp_path):
        path = tmp_path / "chart.json"
        path.write_text(
            json.dumps(
                [
                    {"id": 1000, "name": "Vault", "class": "asset"},
                    {"id": "4000", "name": "Fees", "class": "revenue"},
                ]
            )
        )

        chart = AccountChart.from_json(path)

        assert len(chart) == 2
        assert chart.resolve("vault").id == "1000"
        assert chart.resolve("Fees").account_class == AccountClass.REVENUE

    def test_default_chart_is_fresh_each_call(self):
        assert default_chart() is not default_chart()
