from datetime import date
from decimal import Decimal

from nexus_ledger.domain.transactions import SalaryPayload
from nexus_ledger.domain.value_objects import PaymentMethod, PaymentStatus, TransactionKind
from nexus_ledger.schemas import TransactionRequestSchema, parse_request


class TestTransactionRequestSchema:
    def test_to_domain(self):
        schema = TransactionRequestSchema.model_validate(
            {
                "kind": "salary",
                "amount": 405000,
                "transaction_date": "2025-01-31",
                "description": "  January payroll  ",
                "currency": "rwf",
                "payment_method": "bank",
                "payload": {
                    "employee_name": "Eric",
                    "gross_salary": "500000",
                    "paye_deduction": "80000",
                    "rssb_employee": "15000",
                    "rssb_employer": "25000",
                },
            }
        )

        request = schema.to_domain()

        assert request.kind == TransactionKind.SALARY
        assert request.amount == Decimal("405000")
        assert request.transaction_date == date(2025, 1, 31)
        assert request.description == "January payroll"
        assert request.currency == "RWF"
        assert request.payment_method == PaymentMethod.BANK
        assert request.payment_status == PaymentStatus.PAID
        assert request.payload == SalaryPayload(
            employee_name="Eric",
            gross_salary=Decimal("500000"),
            paye_deduction=Decimal("80000"),
            rssb_employee=Decimal("15000"),
            rssb_employer=Decimal("25000"),
        )
        assert request.field_errors() == []

    def test_empty_payload_gets_defaults(self):
        request, errors = parse_request(
            {"kind": "sale", "amount": "10", "date": "2025-01-01", "description": "x"}
        )

        assert errors == []
        assert request.payload.revenue_account == "Sales Revenue"


class TestParseRequest:
    def test_missing_required_fields(self):
        request, errors = parse_request({"description": "nothing else"})

        assert request is None
        assert {e.field for e in errors} == {"kind", "amount", "transaction_date"}

    def test_unknown_top_level_field(self):
        request, errors = parse_request(
            {"kind": "sale", "amount": "10", "date": "2025-01-01", "colour": "red"}
        )

        assert request is None
        assert [e.field for e in errors] == ["colour"]

    def test_payload_value_errors_name_the_field(self):
        request, errors = parse_request(
            {
                "kind": "share_issuance",
                "amount": "1000",
                "date": "2025-01-01",
                "payload": {"shares_allocated": "many"},
            }
        )

        assert request is None
        assert [e.field for e in errors] == ["shares_allocated"]

    def test_non_mapping_input(self):
        request, errors = parse_request(["not", "a", "request"])

        assert request is None
        assert errors[0].field is None
