"""
Payment handoff to the external payment gateway.

Runs when the wizard enters the completed step. It requests a checkout URL for
the draft's payment plan and performs a full-page redirect to it. The redirect
crosses to the gateway's domain; it is never an in-app navigation.

On failure the traveler stays on the completed step in an error view that
names the reservation already created, and offers the marketplace or the
reservations list. Restarting the wizard would create a duplicate reservation.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from booking.catalog import Product
from booking.models import BookingDraft, BookingErrorKind
from booking.notifications import Notifier
from booking.services.marketplace_client import MarketplaceClient
from shared.config import get_settings

logger = logging.getLogger(__name__)

PLAN_NOT_FOUND_MESSAGE = "Plan de pago no encontrado"
INITIATION_FAILED_MESSAGE = "Error al iniciar el pago. Por favor intenta de nuevo."

# Full-page redirect performed by the host (browser location change)
Redirect = Callable[[str], Awaitable[None] | None]


class HandoffStatus(str, Enum):
    REDIRECTED = "redirected"
    ERROR = "error"


@dataclass(frozen=True)
class HandoffResult:
    """
    Outcome of a payment handoff.

    Attributes:
        status: redirected or error
        checkout_url: Gateway URL the browser was sent to
        error_kind: PAYMENT_INITIATION_FAILED on error
        error_message: Short reason shown as the error view title
        reservation_notice: Reassurance that the reservation exists
        reservation_id: Reservation already created
        navigation: Targets offered from the error view
    """

    status: HandoffStatus
    checkout_url: str | None = None
    error_kind: BookingErrorKind | None = None
    error_message: str | None = None
    reservation_notice: str | None = None
    reservation_id: str | None = None
    navigation: dict[str, str] = field(default_factory=dict)

    @property
    def redirected(self) -> bool:
        return self.status == HandoffStatus.REDIRECTED


class PaymentHandoff:
    """Requests the checkout URL and hands the browser over to the gateway."""

    INSTALLMENT_NUMBER = 1

    def __init__(self, client: MarketplaceClient, notifier: Notifier, redirect: Redirect) -> None:
        self.client = client
        self.notifier = notifier
        self.redirect = redirect
        self.settings = get_settings()

    async def execute(self, draft: BookingDraft, product: Product) -> HandoffResult:
        """
        Start payment for the draft's payment plan.

        Returns:
            HandoffResult; on error no redirect has happened
        """
        if draft.payment_plan is None:
            logger.error(
                "Payment handoff reached without a payment plan",
                extra={"product_id": product.id, "reservation_id": draft.reservation_id},
            )
            return self._error(draft, PLAN_NOT_FOUND_MESSAGE)

        plan_id = draft.payment_plan.id
        logger.info(
            "Initiating payment with gateway",
            extra={
                "product_id": product.id,
                "reservation_id": draft.reservation_id,
                "payment_plan_id": plan_id,
            },
        )

        try:
            response = await self.client.initiate_payment(
                plan_id,
                reservation_id=draft.reservation_id,
                installment_number=self.INSTALLMENT_NUMBER,
            )
        except Exception as e:
            logger.error(
                f"Unexpected error initiating payment: {e}",
                extra={"payment_plan_id": plan_id},
                exc_info=True,
            )
            return self._gateway_error(draft, product, str(e))

        if not response.success or response.data is None or not response.data.checkout_url:
            return self._gateway_error(draft, product, response.error or INITIATION_FAILED_MESSAGE)

        checkout_url = response.data.checkout_url
        logger.info(
            "Checkout URL obtained, redirecting to gateway",
            extra={"payment_plan_id": plan_id, "reservation_id": draft.reservation_id},
        )

        try:
            outcome = self.redirect(checkout_url)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(
                f"Redirect to payment gateway failed: {e}",
                extra={"payment_plan_id": plan_id},
                exc_info=True,
            )
            return self._gateway_error(draft, product, str(e))

        return HandoffResult(
            status=HandoffStatus.REDIRECTED,
            checkout_url=checkout_url,
            reservation_id=draft.reservation_id,
        )

    def _gateway_error(self, draft: BookingDraft, product: Product, reason: str) -> HandoffResult:
        logger.error(
            f"Payment initiation failed: {reason}",
            extra={
                "product_id": product.id,
                "reservation_id": draft.reservation_id,
                "payment_plan_id": draft.payment_plan.id if draft.payment_plan else None,
            },
        )
        self.notifier.error(
            BookingErrorKind.PAYMENT_INITIATION_FAILED,
            INITIATION_FAILED_MESSAGE,
            productId=product.id,
            reservationId=draft.reservation_id,
            category="payment_initiation_error",
        )
        return self._error(draft, reason)

    def _error(self, draft: BookingDraft, message: str) -> HandoffResult:
        notice = None
        if draft.reservation_id:
            notice = (
                f"La reserva #{draft.reservation_id} fue creada exitosamente, pero hubo un "
                f"problema al iniciar el pago. Por favor, contacta a soporte o intenta de nuevo."
            )
        return HandoffResult(
            status=HandoffStatus.ERROR,
            error_kind=BookingErrorKind.PAYMENT_INITIATION_FAILED,
            error_message=message,
            reservation_notice=notice,
            reservation_id=draft.reservation_id,
            navigation={
                "marketplace": self.settings.MARKETPLACE_PATH,
                "reservations": self.settings.RESERVATIONS_PATH,
            },
        )
