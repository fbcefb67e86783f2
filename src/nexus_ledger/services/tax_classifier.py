"""Expense deductibility classification against the RRA category table.

Only purchase and expense transactions are classified. The category
table is injected through a TaxCategoryProvider; the built-in table
mirrors the categories on the RRA income tax declaration.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from nexus_ledger.domain.postings import TaxClassification
from nexus_ledger.exceptions import UnknownTaxCategoryError
from nexus_ledger.services.interfaces import TaxCategory, TaxCategoryProvider

DEFAULT_TAX_CATEGORIES: tuple[TaxCategory, ...] = (
    TaxCategory(
        "crops_purchase",
        "Purchase of Crops",
        "Ibihingwa (Inyanya, ibiribwa,...)",
        True,
        "Agricultural products for business use",
    ),
    TaxCategory(
        "animals_purchase",
        "Purchase of Animals",
        "Amatungo (ihene, inka,...)",
        True,
        "Livestock purchase for business",
    ),
    TaxCategory(
        "animal_products",
        "Products from Animals",
        "Ibikomoka ku matungo (amata, impu,...)",
        True,
        "Animal-derived products",
    ),
    TaxCategory(
        "crop_products",
        "Products from Crops",
        "Ibikomoka ku bihingwa (amakara, inkwi,...)",
        True,
        "Crop-derived products",
    ),
    TaxCategory(
        "unregistered_credit",
        "Purchase on Credit (Unregistered Person)",
        "Ibyaguzwe ku mwenda ku bantu batanditse",
        False,
        "May have limited deductibility",
    ),
    TaxCategory(
        "business_mission",
        "Business Mission (Local & Abroad)",
        "Ubutumwa bw'akazi (mu gihugu, hanze)",
        True,
        "Business travel and mission expenses",
    ),
    TaxCategory(
        "charity_expense",
        "Charity & Donations",
        "Amafaranga y'ubugiraneza",
        False,
        "Charitable contributions - limited deductibility",
    ),
    TaxCategory(
        "insurance_claims",
        "Insurance Claims Paid",
        "Amafaranga yishyuwe n'ubwishingizi",
        True,
        "Insurance premium payments",
    ),
    TaxCategory(
        "depreciation_amortisation",
        "Depreciation / Amortisation",
        "Ubwicungure / gukamuka kw'umutungo",
        True,
        "Asset depreciation and amortisation",
    ),
    TaxCategory(
        "provisions",
        "General & Specific Provisions",
        "Ibyateganirijwe (imanza, imyenda mibi, ishimwe,...)",
        False,
        "Provisions for doubtful debts, legal cases",
    ),
    TaxCategory(
        "ifrs_adjustments",
        "IFRS Adjustments",
        "Ikosora rishingiye kuri IFRS",
        False,
        "Accounting standard adjustments",
    ),
    TaxCategory(
        "accruals",
        "Accruals (unpaid expenses)",
        "Ibyakoreshejwe bitarishyurwa",
        True,
        "Accrued expenses",
    ),
    TaxCategory(
        "unclaimed_vat",
        "Non-claimed VAT",
        "TVA itarasubijwe",
        False,
        "VAT that cannot be claimed back",
    ),
    TaxCategory(
        "bank_momo_fees",
        "Bank/Mobile Money Fees",
        "Serivisi za banki/MoMo",
        True,
        "Banking and mobile money service fees",
    ),
    TaxCategory(
        "forex_loss",
        "Forex Losses",
        "Igihombo cy'ivunjisha",
        True,
        "Foreign exchange losses",
    ),
    TaxCategory(
        "loan_interest_expense",
        "Interest & Loan Charges",
        "Inyungu n'amafaranga ajyana n'inguzanyo",
        True,
        "Interest payments and loan fees",
    ),
    TaxCategory(
        "transport_services",
        "Transport Services",
        "Ubwikorezi bwose",
        True,
        "Transportation and logistics services",
    ),
    TaxCategory(
        "accommodation_services",
        "Accommodation & Meals",
        "Icumbi na serivisi zibiribwa",
        True,
        "Hotel, accommodation and meal expenses",
    ),
    TaxCategory(
        "external_services",
        "Other External Services",
        "Izindi serivisi (amahugurwa, ubusemuzi, etc)",
        True,
        "Professional services, training, consulting",
    ),
    TaxCategory(
        "gov_fees",
        "Government Fees",
        "Serivisi za guverinoma",
        True,
        "Government service fees and permits",
    ),
    TaxCategory(
        "document_fees",
        "Document Fees",
        "Ibyangombwa (Visa, Passport, Permit)",
        True,
        "Document processing fees",
    ),
    TaxCategory(
        "court_charges",
        "Court-Approved Charges",
        "Amafaranga yemejwe n'urukiko",
        True,
        "Legal fees approved by court",
    ),
    TaxCategory(
        "property_transfer_fees",
        "General Property Transfer Fees",
        "Ihinduranya ry'ubutaka, inzu, ibinyabiziga",
        True,
        "Property and asset transfer fees",
    ),
    TaxCategory(
        "parking_fees",
        "Parking Fees",
        "Kwishyura parikingi",
        True,
        "Parking and related fees",
    ),
    TaxCategory(
        "other_expenses",
        "Other Business Expenses",
        "Izindi byongeyeho",
        True,
        "Miscellaneous business expenses",
    ),
)


class InMemoryTaxCategoryProvider:
    """TaxCategoryProvider backed by a static table."""

    def __init__(self, categories: Iterable[TaxCategory] = DEFAULT_TAX_CATEGORIES) -> None:
        self._categories = {c.code: c for c in categories}

    def lookup(self, code: str) -> TaxCategory | None:
        return self._categories.get(code)

    def all_categories(self) -> list[TaxCategory]:
        return list(self._categories.values())


@dataclass
class CategoryTotal:
    code: str
    label: str
    deductible: bool
    amount: Decimal = Decimal("0")
    count: int = 0


@dataclass
class TaxSummary:
    deductible_total: Decimal
    non_deductible_total: Decimal
    breakdown: list[CategoryTotal] = field(default_factory=list)


class TaxClassifier:
    """Maps a declared tax category to deductibility and labels.

    Attributes:
        provider: Source of the configured category table
    """

    UNKNOWN_LABEL = "Unknown"

    def __init__(self, provider: TaxCategoryProvider | None = None) -> None:
        self._provider = provider or InMemoryTaxCategoryProvider()

    def classify(self, code: str) -> TaxClassification:
        """Classify a tax category code.

        Raises:
            UnknownTaxCategoryError: If the code is not in the category table
        """
        category = self._provider.lookup(code)
        if category is None:
            raise UnknownTaxCategoryError(code)
        return TaxClassification(
            code=category.code,
            deductible=category.deductible,
            label=category.label,
            label_localized=category.label_localized,
        )

    def summarize(self, items: Iterable[tuple[str | None, Decimal]]) -> TaxSummary:
        """Aggregate (category code, amount) pairs into deductibility totals.

        Items without a code count as "other_expenses". Unknown codes are
        reported under their own code and treated as non-deductible.
        """
        totals: dict[str, CategoryTotal] = {}
        for code, amount in items:
            code = code or "other_expenses"
            total = totals.get(code)
            if total is None:
                category = self._provider.lookup(code)
                total = CategoryTotal(
                    code=code,
                    label=category.label if category else self.UNKNOWN_LABEL,
                    deductible=category.deductible if category else False,
                )
                totals[code] = total
            total.amount += amount
            total.count += 1

        breakdown = sorted(totals.values(), key=lambda t: t.amount, reverse=True)
        return TaxSummary(
            deductible_total=sum(
                (t.amount for t in breakdown if t.deductible), Decimal("0")
            ),
            non_deductible_total=sum(
                (t.amount for t in breakdown if not t.deductible), Decimal("0")
            ),
            breakdown=breakdown,
        )
