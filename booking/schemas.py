"""Pydantic models for marketplace booking API payloads."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaymentType(str, Enum):
    """Settlement mode: cash (single payment) or installments."""

    CASH = "CONTADO"
    INSTALLMENTS = "PLAZOS"


class ActionResponse(BaseModel, Generic[T]):
    """
    Envelope returned by every marketplace operation.

    Failures are values, not exceptions: `success=False` with `error` set and
    no `data`.
    """

    success: bool
    data: T | None = None
    error: str | None = None


class AvailabilityResult(BaseModel):
    """Availability check outcome. `available=False` is a normal result."""

    available: bool
    message: str | None = None
    remaining_slots: int | None = Field(default=None, alias="remainingSlots")

    model_config = ConfigDict(populate_by_name=True)


class ReservationInput(BaseModel):
    """
    Reservation creation request.

    Carries party size, product and date only. Prices are computed server-side
    and are never sent by the client.
    """

    adults: int = Field(ge=1)
    kids: int = Field(default=0, ge=0)
    babys: int = Field(default=0, ge=0)
    experience_id: str
    collection_type: str
    reservation_date: str = Field(serialization_alias="reservationDate")
    type: str


class Reservation(BaseModel):
    """Reservation record as returned by the backend."""

    id: str
    total_price: float | None = None
    status: str | None = None

    model_config = ConfigDict(frozen=True, extra="allow")


class PaymentPlanInput(BaseModel):
    """Payment plan generation request."""

    product_id: str
    total_cost: float
    travel_date: str
    currency: str
    payment_type_selected: str


class PaymentPlan(BaseModel):
    """
    Server-computed payment plan.

    Immutable once received; a new plan replaces the old one wholesale.
    """

    id: str
    total_cost: float
    currency: str
    cash_final_amount: float | None = None
    cash_discount_percentage: float | None = None
    installment_total_amount: float | None = None
    payment_type_selected: str | None = None

    model_config = ConfigDict(frozen=True, extra="allow")

    def amount_due(self, payment_type: PaymentType | str) -> float:
        """Amount the traveler pays under the given settlement mode."""
        if PaymentType(payment_type) == PaymentType.INSTALLMENTS:
            amount = self.installment_total_amount
        else:
            amount = self.cash_final_amount
        return self.total_cost if amount is None else amount


class CheckoutSession(BaseModel):
    """Checkout URL issued by the payment gateway."""

    checkout_url: str = Field(alias="checkoutUrl")
    payment_id: str | None = Field(default=None, alias="paymentId")
    amount: float | None = None
    currency: str | None = None
    expires_at: str | None = Field(default=None, alias="expiresAt")

    model_config = ConfigDict(populate_by_name=True)
