from decimal import Decimal

import pytest

from nexus_ledger.exceptions import UnknownTaxCategoryError
from nexus_ledger.services.interfaces import TaxCategory
from nexus_ledger.services.tax_classifier import (
    DEFAULT_TAX_CATEGORIES,
    InMemoryTaxCategoryProvider,
    TaxClassifier,
)


@pytest.fixture
def classifier() -> TaxClassifier:
    return TaxClassifier()


class TestDefaultCategories:
    def test_codes_are_unique(self):
        codes = [c.code for c in DEFAULT_TAX_CATEGORIES]

        assert len(codes) == len(set(codes))
        assert len(codes) == 25

    def test_every_category_has_both_labels(self):
        for category in DEFAULT_TAX_CATEGORIES:
            assert category.label
            assert category.label_localized

    @pytest.mark.parametrize(
        "code",
        ["unregistered_credit", "charity_expense", "provisions", "ifrs_adjustments", "unclaimed_vat"],
    )
    def test_non_deductible_categories(self, code):
        provider = InMemoryTaxCategoryProvider()

        assert provider.lookup(code).deductible is False


class TestClassify:
    def test_deductible_category(self, classifier):
        result = classifier.classify("transport_services")

        assert result.code == "transport_services"
        assert result.deductible is True
        assert result.label == "Transport Services"
        assert result.label_localized == "Ubwikorezi bwose"

    def test_non_deductible_category(self, classifier):
        result = classifier.classify("charity_expense")

        assert result.deductible is False
        assert result.label == "Charity & Donations"

    def test_unknown_category_raises(self, classifier):
        with pytest.raises(UnknownTaxCategoryError) as exc_info:
            classifier.classify("yacht_maintenance")

        assert exc_info.value.field == "tax_category"
        assert exc_info.value.context == {"tax_category": "yacht_maintenance"}

    def test_uses_injected_provider(self):
        provider = InMemoryTaxCategoryProvider(
            [TaxCategory("training", "Staff Training", "Amahugurwa", True)]
        )
        classifier = TaxClassifier(provider)

        assert classifier.classify("training").label == "Staff Training"
        with pytest.raises(UnknownTaxCategoryError):
            classifier.classify("transport_services")


class TestSummarize:
    def test_splits_deductible_and_non_deductible(self, classifier):
        summary = classifier.summarize(
            [
                ("transport_services", Decimal("30000")),
                ("charity_expense", Decimal("10000")),
                ("transport_services", Decimal("5000")),
            ]
        )

        assert summary.deductible_total == Decimal("35000")
        assert summary.non_deductible_total == Decimal("10000")

    def test_breakdown_sorted_by_amount(self, classifier):
        summary = classifier.summarize(
            [
                ("parking_fees", Decimal("1000")),
                ("gov_fees", Decimal("9000")),
                ("parking_fees", Decimal("2000")),
            ]
        )

        assert [t.code for t in summary.breakdown] == ["gov_fees", "parking_fees"]
        parking = summary.breakdown[1]
        assert parking.amount == Decimal("3000")
        assert parking.count == 2

    def test_missing_code_counts_as_other_expenses(self, classifier):
        summary = classifier.summarize([(None, Decimal("700"))])

        assert summary.breakdown[0].code == "other_expenses"
        assert summary.deductible_total == Decimal("700")

    def test_unknown_code_is_non_deductible(self, classifier):
        summary = classifier.summarize([("mystery", Decimal("50"))])

        assert summary.breakdown[0].label == "Unknown"
        assert summary.non_deductible_total == Decimal("50")

    def test_empty_input(self, classifier):
        summary = classifier.summarize([])

        assert summary.deductible_total == Decimal("0")
        assert summary.breakdown == []
