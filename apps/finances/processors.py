"""
Payment processors

The payment flow talks to a processor through AbstractPaymentProcessor.
SimulatedPaymentProcessor emulates a card-network round trip: it waits,
declines the configured test cards and returns a fresh transaction id.
A real gateway client implements the same charge() coroutine.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from shared.domain.exceptions import PaymentGatewayError
from shared.domain.value_objects import Money

from .conf import payments_setting
from .domain.card import digits_only, last_four
from .domain.entities import generate_transaction_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChargeRequest:
    booking_id: UUID
    amount: Money
    card_number: str = field(repr=False)
    expiry_date: str = field(repr=False)
    cvv: str = field(repr=False)
    cardholder_name: str
    email: str


@dataclass(frozen=True)
class ChargeResult:
    transaction_id: str


class AbstractPaymentProcessor(ABC):

    @abstractmethod
    async def charge(self, request: ChargeRequest) -> ChargeResult:
        """Capture the amount or raise PaymentGatewayError"""


class SimulatedPaymentProcessor(AbstractPaymentProcessor):
    """No network calls; used for development, demos and tests."""

    def __init__(
        self,
        delay_seconds: Decimal | float | None = None,
        declined_card_numbers: Iterable[str] | None = None,
    ):
        if delay_seconds is None:
            delay_seconds = payments_setting("SETTLEMENT_DELAY_SECONDS")
        if declined_card_numbers is None:
            declined_card_numbers = payments_setting("DECLINED_CARD_NUMBERS")
        self.delay_seconds = max(float(delay_seconds), 0.0)
        self.declined_card_numbers = {digits_only(number) for number in declined_card_numbers}

    async def charge(self, request: ChargeRequest) -> ChargeResult:
        logger.info(
            f"Simulating charge of {request.amount} for booking {request.booking_id} "
            f"(card ending {last_four(request.card_number)})"
        )

        await asyncio.sleep(self.delay_seconds)

        if digits_only(request.card_number) in self.declined_card_numbers:
            logger.warning(f"Simulated decline for booking {request.booking_id}")
            raise PaymentGatewayError("Card was declined", code="card_declined")

        result = ChargeResult(transaction_id=generate_transaction_id())
        logger.info(f"Simulated charge approved: {result.transaction_id}")
        return result
