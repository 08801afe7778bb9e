"""
Marketplace client for the booking backend operations.

This module provides the MarketplaceClient class, the only adapter between the
booking saga and the marketplace API:

- check_availability: party-size availability for a product
- create_reservation: durable reservation record (prices computed server-side)
- generate_payment_plan: cash / installments breakdown for a reservation
- initiate_payment: checkout URL on the external payment gateway

Every operation returns an ActionResponse envelope. Transport failures and
malformed payloads are converted into `success=False` here and never raised
to the caller. No operation is retried: a duplicate reservation is worse than
a failed request.
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from booking.schemas import (
    ActionResponse,
    AvailabilityResult,
    CheckoutSession,
    PaymentPlan,
    PaymentPlanInput,
    Reservation,
    ReservationInput,
)
from shared.config import get_settings

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

AVAILABILITY_PATH = "/availability/check"
RESERVATIONS_PATH = "/reservations"
PAYMENT_PLANS_PATH = "/payment-plans"
CHECKOUT_PATH = "/payments/checkout"


class MarketplaceClient:
    """
    Client for the marketplace booking API.

    Args:
        base_url: API base URL (defaults to MARKETPLACE_API_URL)
        api_token: Bearer token (defaults to MARKETPLACE_API_TOKEN)
        timeout: Per-request transport timeout in seconds
        transport: Optional httpx transport (tests inject httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        # Remove trailing slash to avoid double slashes in URLs
        self.api_url = (base_url or settings.MARKETPLACE_API_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

        self.headers = {
            "Authorization": f"Bearer {api_token or settings.MARKETPLACE_API_TOKEN}",
            "Content-Type": "application/json",
        }

        logger.info(f"MarketplaceClient initialized: {self.api_url}")

    async def _post(
        self,
        operation: str,
        path: str,
        payload: dict[str, Any],
        model: type[M],
    ) -> ActionResponse[M]:
        """
        POST a JSON payload and parse the `{success, data, error}` envelope.

        Returns:
            Parsed envelope; a failed envelope on transport, HTTP or
            parsing errors
        """
        envelope = ActionResponse[model]  # type: ignore[valid-type]

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{self.api_url}{path}",
                    json=payload,
                    headers=self.headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error in {operation}: {e}")
            return envelope(success=False, error=f"Error de conexión: {e}")

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.is_error:
            error = body.get("error") if isinstance(body, dict) else None
            logger.error(
                f"{operation} rejected with HTTP {response.status_code}: {error}"
            )
            return envelope(
                success=False,
                error=error or f"Error del servidor ({response.status_code})",
            )

        try:
            result = envelope.model_validate(body)
        except ValidationError as e:
            logger.error(f"Malformed {operation} response: {e}")
            return envelope(success=False, error="Respuesta inválida del servidor")

        if result.success and result.data is None:
            logger.error(f"{operation} reported success without data")
            return envelope(success=False, error="Respuesta vacía del servidor")

        return result

    async def check_availability(
        self,
        product_id: str,
        adults: int,
        kids: int = 0,
        babys: int = 0,
        travel_date: str | None = None,
        season_id: str | None = None,
        price_option_id: str | None = None,
    ) -> ActionResponse[AvailabilityResult]:
        """
        Check whether the product can host the party.

        `data.available=False` is a normal outcome, not an error.
        """
        payload: dict[str, Any] = {
            "experience_id": product_id,
            "adults": adults,
            "kids": kids,
            "babys": babys,
        }
        if travel_date:
            payload["date"] = travel_date
        if season_id:
            payload["season_id"] = season_id
        if price_option_id:
            payload["price_id"] = price_option_id

        logger.debug(
            f"Checking availability: adults={adults}, kids={kids}, babys={babys}",
            extra={"product_id": product_id},
        )
        return await self._post("check_availability", AVAILABILITY_PATH, payload, AvailabilityResult)

    async def create_reservation(
        self, reservation_input: ReservationInput
    ) -> ActionResponse[Reservation]:
        """Create the reservation; the server computes every price."""
        payload = reservation_input.model_dump(by_alias=True)
        return await self._post("create_reservation", RESERVATIONS_PATH, payload, Reservation)

    async def generate_payment_plan(
        self, plan_input: PaymentPlanInput
    ) -> ActionResponse[PaymentPlan]:
        """Generate the payment plan for an existing reservation's total."""
        return await self._post(
            "generate_payment_plan", PAYMENT_PLANS_PATH, plan_input.model_dump(), PaymentPlan
        )

    async def initiate_payment(
        self,
        payment_plan_id: str,
        reservation_id: str | None = None,
        installment_number: int = 1,
    ) -> ActionResponse[CheckoutSession]:
        """Request a checkout URL on the payment gateway for a payment plan."""
        payload: dict[str, Any] = {
            "paymentPlanId": payment_plan_id,
            "installmentNumber": installment_number,
        }
        if reservation_id:
            payload["reservationId"] = reservation_id

        return await self._post("initiate_payment", CHECKOUT_PATH, payload, CheckoutSession)
