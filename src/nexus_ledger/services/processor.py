"""TransactionProcessor: the single entry point of the posting engine.

One request in, one PostingResult out. Validation failures are collected
into the result; only the ledger store mutates state, and only after the
journal entries have been generated and balance-checked.
"""

from collections.abc import Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Any
from uuid import uuid4

from nexus_ledger.domain.accounts import AccountChart
from nexus_ledger.domain.postings import ErrorDetail, PostingResult, TaxClassification
from nexus_ledger.domain.transactions import (
    AssetPayload,
    EquityAdjustmentPayload,
    PurchasePayload,
    SalaryPayload,
    SalePayload,
    ShareIssuancePayload,
    TransactionRequest,
    TransferPayload,
)
from nexus_ledger.domain.value_objects import AccountClass, PaymentStatus, quantize
from nexus_ledger.exceptions import (
    CurrencyConversionError,
    DuplicateTransactionError,
    StorageError,
    UnbalancedEntriesError,
    UnknownTaxCategoryError,
    ValidationError,
)
from nexus_ledger.logging_config import LogContext, get_logger
from nexus_ledger.services.interfaces import CurrencyConverter
from nexus_ledger.services.journal import JournalEntryGenerator, share_split
from nexus_ledger.services.payment_status import PaymentStatusResolver
from nexus_ledger.services.posting import LedgerPoster
from nexus_ledger.services.tax_classifier import TaxClassifier

logger = get_logger(__name__)

INTERNAL_ERROR = "INTERNAL_ERROR"


class TransactionProcessor:
    """Validates, classifies, generates and posts one transaction at a time."""

    def __init__(
        self,
        chart: AccountChart,
        generator: JournalEntryGenerator,
        poster: LedgerPoster,
        resolver: PaymentStatusResolver | None = None,
        tax_classifier: TaxClassifier | None = None,
        currency_converter: CurrencyConverter | None = None,
        base_currency: str = "RWF",
        enable_tax_classification: bool = True,
    ) -> None:
        self._chart = chart
        self._generator = generator
        self._poster = poster
        self._resolver = resolver or PaymentStatusResolver()
        self._tax_classifier = tax_classifier or TaxClassifier()
        self._currency_converter = currency_converter
        self._base_currency = base_currency.upper()
        self._enable_tax_classification = enable_tax_classification

    @property
    def poster(self) -> LedgerPoster:
        return self._poster

    def process(self, request: TransactionRequest) -> PostingResult:
        """Process one transaction request.

        Args:
            request: The transaction to post

        Returns:
            PostingResult. On success it carries the balanced entries and
            the ledger updates that were committed; otherwise one
            ErrorDetail per failed check and no updates.
        """
        key = request.idempotency_key or str(uuid4())
        with LogContext(idempotency_key=key, kind=request.kind.value):
            return self._process(request, key)

    def process_raw(self, data: Mapping[str, Any]) -> PostingResult:
        """Parse a raw mapping (e.g. decoded JSON) and process it."""
        from nexus_ledger.schemas import parse_request

        request, errors = parse_request(data)
        if request is None:
            key = data.get("idempotency_key") if isinstance(data, Mapping) else None
            logger.info(
                "transaction_rejected",
                idempotency_key=key,
                fields=[e.field for e in errors],
            )
            return PostingResult.failure(errors, key)
        return self.process(request)

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def _process(self, request: TransactionRequest, key: str) -> PostingResult:
        errors = request.field_errors()
        errors.extend(self._precision_errors(request))
        if not any(e.field == "payload" for e in errors):
            errors.extend(self._account_errors(request))
            errors.extend(self._share_errors(request, errors))

        tax, tax_error = self._classify(request)
        if tax_error is not None:
            errors.append(tax_error)

        if not errors:
            request, conversion_errors = self._to_base_currency(request)
            errors.extend(conversion_errors)

        if errors:
            return self._reject(errors, key)

        try:
            settlement = self._resolver.resolve(
                request.amount, request.payment_status, request.paid_amount
            )
            entries = self._generator.generate(request, settlement, self._chart)
        except UnbalancedEntriesError:
            logger.exception("unbalanced_entries")
            return PostingResult.failure(
                [
                    ErrorDetail(
                        field=None,
                        message="Transaction could not be posted: internal error",
                        code=INTERNAL_ERROR,
                    )
                ],
                key,
            )
        except ValidationError as exc:
            return self._reject([ErrorDetail.from_exception(exc)], key)

        updates = self._poster.build_updates(request, entries, settlement)
        result = PostingResult(
            success=True,
            entries=tuple(entries),
            ledger_updates=tuple(updates),
            idempotency_key=key,
            tax_classification=tax,
            currency=self._base_currency,
        )

        try:
            self._poster.post(request, entries, updates, result)
        except DuplicateTransactionError as exc:
            if exc.original is None:
                return self._storage_failure(exc, key)
            logger.info("transaction_replayed")
            return exc.original.as_replay()
        except StorageError as exc:
            return self._storage_failure(exc, key)

        logger.info(
            "transaction_posted",
            entries=len(entries),
            amount=str(result.total_debits),
            currency=self._base_currency,
        )
        return result

    def _reject(self, errors: list[ErrorDetail], key: str) -> PostingResult:
        logger.info("transaction_rejected", fields=[e.field for e in errors])
        return PostingResult.failure(errors, key)

    def _storage_failure(self, exc: StorageError, key: str) -> PostingResult:
        logger.error("storage_failed", error=exc.message)
        return PostingResult.failure(
            [ErrorDetail(field=None, message=exc.message, code=StorageError.error_code)],
            key,
        )

    # -------------------------------------------------------------------------
    # Checks that need collaborators
    # -------------------------------------------------------------------------

    def _account_errors(self, request: TransactionRequest) -> list[ErrorDetail]:
        payload = request.payload
        errors: list[ErrorDetail] = []

        if isinstance(payload, TransferPayload):
            if payload.from_account and payload.to_account:
                errors.extend(
                    self._paired_account_errors(
                        payload.from_account, payload.to_account, AccountClass.ASSET
                    )
                )
        elif isinstance(payload, EquityAdjustmentPayload):
            errors.extend(
                self._paired_account_errors(
                    payload.from_account, payload.to_account, AccountClass.EQUITY
                )
            )
        elif isinstance(payload, SalePayload):
            errors.extend(self._named_account_errors(payload.revenue_account, "revenue_account"))
        elif isinstance(payload, PurchasePayload):
            errors.extend(self._named_account_errors(payload.expense_account, "expense_account"))
        elif isinstance(payload, AssetPayload):
            errors.extend(self._named_account_errors(payload.asset_account, "asset_account"))
        return errors

    def _named_account_errors(self, name: str, field: str) -> list[ErrorDetail]:
        try:
            self._chart.resolve(name, field=field)
        except ValidationError as exc:
            return [ErrorDetail.from_exception(exc)]
        return []

    def _paired_account_errors(
        self, source_name: str, target_name: str, account_class: AccountClass
    ) -> list[ErrorDetail]:
        errors: list[ErrorDetail] = []
        resolved = {}
        for field, name in (("from_account", source_name), ("to_account", target_name)):
            try:
                account = self._chart.resolve(name, field=field)
            except ValidationError as exc:
                errors.append(ErrorDetail.from_exception(exc))
                continue
            if account.account_class != account_class:
                errors.append(
                    ErrorDetail(
                        field,
                        f"{account.name} is not an {account_class.value} account",
                        "INVALID_ACCOUNT_CLASS",
                    )
                )
            resolved[field] = account
        if (
            len(resolved) == 2
            and resolved["from_account"].id == resolved["to_account"].id
        ):
            errors.append(
                ErrorDetail(
                    "to_account",
                    "Source and destination accounts must differ",
                    "SAME_ACCOUNT",
                )
            )
        return errors

    def _share_errors(
        self, request: TransactionRequest, errors: list[ErrorDetail]
    ) -> list[ErrorDetail]:
        payload = request.payload
        if not isinstance(payload, ShareIssuancePayload) or request.amount <= 0:
            return []
        if any(e.field in ("par_value", "shares_allocated") for e in errors):
            return []
        par_value = payload.par_value or self._generator.default_par_value
        shares, capital, premium = share_split(
            request.amount, par_value, payload.shares_allocated
        )
        if shares == 0:
            return [
                ErrorDetail(
                    "amount",
                    f"Amount is below the par value of one share ({par_value})",
                )
            ]
        if premium < 0:
            return [
                ErrorDetail(
                    "shares_allocated",
                    f"{shares} shares at par {par_value} exceed the amount received",
                    "SHARES_BELOW_PAR",
                )
            ]
        return []

    def _classify(
        self, request: TransactionRequest
    ) -> tuple[TaxClassification | None, ErrorDetail | None]:
        payload = request.payload
        if not self._enable_tax_classification or not request.kind.is_tax_classified:
            return None, None
        if not isinstance(payload, PurchasePayload):
            return None, None
        if not payload.tax_category:
            return None, None
        try:
            return self._tax_classifier.classify(payload.tax_category), None
        except UnknownTaxCategoryError as exc:
            return None, ErrorDetail.from_exception(exc)

    def _precision_errors(self, request: TransactionRequest) -> list[ErrorDetail]:
        places = self._generator.decimal_places
        amounts: list[tuple[str, Decimal | None]] = [
            ("amount", request.amount),
            ("paid_amount", request.paid_amount),
        ]
        payload = request.payload
        if isinstance(payload, SalaryPayload):
            amounts += [
                ("gross_salary", payload.gross_salary),
                ("paye_deduction", payload.paye_deduction),
                ("rssb_employee", payload.rssb_employee),
                ("rssb_employer", payload.rssb_employer),
            ]
        return [
            ErrorDetail(
                name,
                f"{name} has more than {places} decimal places",
                "INVALID_PRECISION",
            )
            for name, value in amounts
            if value is not None and value.is_finite() and value != quantize(value, places)
        ]

    def _to_base_currency(
        self, request: TransactionRequest
    ) -> tuple[TransactionRequest, list[ErrorDetail]]:
        currency = (request.currency or self._base_currency).upper()
        if currency == self._base_currency:
            return request, []
        if self._currency_converter is None:
            exc = CurrencyConversionError(
                currency, self._base_currency, "no currency converter is configured"
            )
            return request, [ErrorDetail.from_exception(exc)]

        places = self._generator.decimal_places

        def convert(value: Decimal) -> Decimal:
            converted = self._currency_converter.convert(
                value, currency, self._base_currency, request.transaction_date
            )
            return quantize(converted, places)

        try:
            changes: dict[str, Any] = {
                "amount": convert(request.amount),
                "currency": self._base_currency,
            }
            if request.paid_amount is not None:
                changes["paid_amount"] = convert(request.paid_amount)
            payload = request.payload
            if isinstance(payload, SalaryPayload) and payload.gross_salary is not None:
                paye = convert(payload.paye_deduction)
                rssb_employee = convert(payload.rssb_employee)
                # Gross is rebuilt from the rounded parts so the payroll lines balance.
                changes["payload"] = replace(
                    payload,
                    gross_salary=changes["amount"] + paye + rssb_employee,
                    paye_deduction=paye,
                    rssb_employee=rssb_employee,
                    rssb_employer=convert(payload.rssb_employer),
                )
        except LookupError as exc:
            error = CurrencyConversionError(currency, self._base_currency, str(exc))
            return request, [ErrorDetail.from_exception(error)]

        logger.debug(
            "currency_converted",
            from_currency=currency,
            to_currency=self._base_currency,
            amount=str(request.amount),
            converted=str(changes["amount"]),
        )
        converted = replace(request, **changes)
        return converted, self._converted_amount_errors(converted)

    def _converted_amount_errors(self, request: TransactionRequest) -> list[ErrorDetail]:
        if request.amount <= 0:
            return [
                ErrorDetail(
                    "amount",
                    f"Amount rounds to zero in {self._base_currency}",
                    "INVALID_PRECISION",
                )
            ]
        if (
            request.payment_status == PaymentStatus.PARTIALLY_PAID
            and request.paid_amount is not None
            and not (Decimal("0") < request.paid_amount < request.amount)
        ):
            return [
                ErrorDetail(
                    "paid_amount",
                    f"Paid amount is no longer a partial payment once converted to "
                    f"{self._base_currency}",
                    "INVALID_PRECISION",
                )
            ]
        return []
