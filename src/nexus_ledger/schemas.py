"""Pydantic v2 schemas for raw transaction requests."""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from nexus_ledger.domain.postings import ErrorDetail
from nexus_ledger.domain.transactions import (
    PAYLOAD_TYPES,
    TransactionRequest,
    payload_field_names,
)
from nexus_ledger.domain.value_objects import PaymentMethod, PaymentStatus, TransactionKind


class TransactionRequestSchema(BaseModel):
    """Schema for a raw transaction request (e.g. decoded JSON).

    Amount checks are left to TransactionRequest so that every failing
    field is reported together.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    kind: TransactionKind = Field(validation_alias=AliasChoices("kind", "type"))
    amount: Decimal
    transaction_date: date = Field(
        validation_alias=AliasChoices("transaction_date", "date")
    )
    description: str = ""
    currency: str = Field(default="RWF", min_length=3, max_length=3)
    payment_method: PaymentMethod = PaymentMethod.BANK
    payment_status: PaymentStatus = PaymentStatus.PAID
    paid_amount: Decimal | None = None
    due_date: date | None = None
    party_name: str | None = None
    reference_number: str | None = None
    idempotency_key: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> TransactionRequest:
        """Convert to a TransactionRequest.

        Raises:
            pydantic.ValidationError: If the payload does not fit the kind
        """
        payload_type = PAYLOAD_TYPES[self.kind]
        payload = TypeAdapter(payload_type).validate_python(self.payload)
        return TransactionRequest(
            kind=self.kind,
            amount=self.amount,
            transaction_date=self.transaction_date,
            description=self.description,
            payload=payload,
            currency=self.currency.upper(),
            payment_method=self.payment_method,
            payment_status=self.payment_status,
            paid_amount=self.paid_amount,
            due_date=self.due_date,
            party_name=self.party_name,
            reference_number=self.reference_number,
            idempotency_key=self.idempotency_key,
        )


def _field_name(loc: tuple[Any, ...]) -> str | None:
    names = [part for part in loc if isinstance(part, str)]
    return names[0] if names else None


def errors_from_pydantic(exc: PydanticValidationError) -> list[ErrorDetail]:
    """Convert a pydantic ValidationError into one ErrorDetail per failure."""
    return [
        ErrorDetail(field=_field_name(error["loc"]), message=error["msg"])
        for error in exc.errors()
    ]


def parse_request(
    data: Mapping[str, Any],
) -> tuple[TransactionRequest | None, list[ErrorDetail]]:
    """Parse a raw mapping into a TransactionRequest.

    Returns:
        (request, []) on success, (None, errors) otherwise
    """
    if not isinstance(data, Mapping):
        return None, [ErrorDetail(field=None, message="Request must be an object")]

    try:
        schema = TransactionRequestSchema.model_validate(dict(data))
    except PydanticValidationError as exc:
        return None, errors_from_pydantic(exc)

    unknown = sorted(set(schema.payload) - payload_field_names(schema.kind))
    if unknown:
        return None, [
            ErrorDetail(
                field=name,
                message=f"Unknown field for {schema.kind.value}: {name}",
            )
            for name in unknown
        ]

    try:
        return schema.to_domain(), []
    except PydanticValidationError as exc:
        return None, errors_from_pydantic(exc)
