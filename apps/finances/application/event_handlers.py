"""Payment audit handlers, registered in FinancesConfig.ready()."""

import structlog

from apps.bookings.domain.events import BookingPaid

logger = structlog.get_logger(__name__)


def log_payment_settled(event: BookingPaid):
    logger.info(
        "payment.settled",
        payment_id=str(event.payment_id),
        transaction_id=event.transaction_id,
        booking_id=str(event.booking_id),
        amount=str(event.amount.amount),
        currency=event.amount.currency,
    )


def register_handlers(bus):
    bus.register_event_handler(BookingPaid, log_payment_settled)
