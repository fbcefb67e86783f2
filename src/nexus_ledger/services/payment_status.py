"""Split a transaction amount into its cash-settled and outstanding portions."""

from dataclasses import dataclass
from decimal import Decimal

from nexus_ledger.domain.value_objects import PaymentStatus
from nexus_ledger.exceptions import InvalidPaymentStateError


@dataclass(frozen=True, slots=True)
class Settlement:
    cash_amount: Decimal
    outstanding_amount: Decimal

    @property
    def total(self) -> Decimal:
        return self.cash_amount + self.outstanding_amount

    @property
    def has_outstanding(self) -> bool:
        return self.outstanding_amount > 0


class PaymentStatusResolver:
    """Resolves a declared payment status into cash and outstanding amounts.

    Pure: holds no state and touches no collaborators.
    """

    def resolve(
        self,
        amount: Decimal,
        status: PaymentStatus,
        paid_amount: Decimal | None = None,
    ) -> Settlement:
        """Compute the settlement for a transaction.

        Args:
            amount: Total transaction amount (positive)
            status: Declared payment status
            paid_amount: Amount settled now; required for PARTIALLY_PAID

        Returns:
            Settlement whose cash and outstanding amounts sum to amount

        Raises:
            InvalidPaymentStateError: If paid_amount is missing, not positive,
                or not less than amount for a partial payment
        """
        zero = Decimal("0")

        if status == PaymentStatus.PAID:
            return Settlement(cash_amount=amount, outstanding_amount=zero)

        if status == PaymentStatus.UNPAID:
            return Settlement(cash_amount=zero, outstanding_amount=amount)

        if paid_amount is None:
            raise InvalidPaymentStateError("paid amount is required when partially paid")
        if paid_amount <= zero:
            raise InvalidPaymentStateError(
                f"paid amount {paid_amount} must be greater than 0"
            )
        if paid_amount >= amount:
            raise InvalidPaymentStateError(
                f"paid amount {paid_amount} must be less than the amount {amount}"
            )
        return Settlement(cash_amount=paid_amount, outstanding_amount=amount - paid_amount)
