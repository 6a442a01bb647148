"""
Payment Domain Entities

- PaymentTransaction: immutable record of one settlement attempt
- TransactionStatus: outcome of the attempt

Only the last four digits and the brand of the card are kept here; the
full card number and CVV never leave the payment form.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from shared.domain.exceptions import ValidationError
from shared.domain.value_objects import Money


class TransactionStatus(Enum):
    COMPLETED = 'completed'
    FAILED = 'failed'


DEFAULT_PAYMENT_METHOD = 'Credit Card'


def generate_transaction_id() -> str:
    """
    Opaque processor reference: txn_ + 32 hex chars of a random UUID4.

    With 122 random bits the chance of any collision among n ids is
    roughly n**2 / 2**123.
    """
    return f"txn_{uuid4().hex}"


@dataclass(frozen=True, kw_only=True)
class PaymentTransaction:
    """
    Payment Transaction (immutable)

    Many transactions may exist per booking (one per attempt), but at most
    one of them is completed.
    """
    booking_id: UUID
    user_id: int
    amount: Money
    card_last_four: str
    card_brand: str
    transaction_status: TransactionStatus
    transaction_id: str = field(default_factory=generate_transaction_id)
    payment_method: str = DEFAULT_PAYMENT_METHOD
    failure_reason: str = ''
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if len(self.card_last_four) != 4 or not self.card_last_four.isdigit():
            raise ValidationError("card_last_four must be exactly 4 digits")
        if not self.transaction_id:
            raise ValidationError("transaction_id is required")

    @property
    def currency(self) -> str:
        return self.amount.currency

    @property
    def is_completed(self) -> bool:
        return self.transaction_status == TransactionStatus.COMPLETED

    def __str__(self):
        return f"{self.transaction_id} {self.amount} ({self.transaction_status.value})"
