"""
Booking transaction handlers.

Unlike a database transaction these are forward-only: a failed step never
undoes the steps before it, because the reservation is a durable server-side
record.

Transaction handlers:
- ReservationSaga: availability -> reservation -> payment plan
- PaymentHandoff: checkout URL request and redirect to the payment gateway
"""

from booking.transactions.payment_handoff import HandoffResult, HandoffStatus, PaymentHandoff
from booking.transactions.reservation_saga import ReservationSaga, SagaOutcome, StepResult

__all__ = [
    "HandoffResult",
    "HandoffStatus",
    "PaymentHandoff",
    "ReservationSaga",
    "SagaOutcome",
    "StepResult",
]
