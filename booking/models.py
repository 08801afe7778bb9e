"""
Booking draft data models.

This module defines the core data structures used by the booking wizard:
- WizardStep: Enum of wizard steps, in display order
- Direction: Navigation direction for WizardFSM.advance()
- PaymentType: Settlement mode chosen by the traveler
- BookingErrorKind: Taxonomy of user-visible failures
- Companion: One traveler row of the roster
- BookingDraft: Immutable snapshot of the accumulated booking data
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from booking.schemas import PaymentPlan, PaymentType


class WizardStep(str, Enum):
    """Steps of the booking wizard."""

    DATE = "date"  # Season and room selection
    TRAVELERS = "travelers"  # Party size and companion roster
    REVIEW = "review"  # Summary, payment type, confirmation
    PAYMENT = "payment"
    COMPLETED = "completed"  # Payment handoff to the gateway


class Direction(str, Enum):
    """Navigation direction for the wizard."""

    NEXT = "next"
    PREVIOUS = "previous"


class BookingErrorKind(str, Enum):
    """Kinds of user-visible booking failures."""

    UNAVAILABLE = "unavailable"
    RESERVATION_FAILED = "reservation_failed"
    PAYMENT_PLAN_FAILED = "payment_plan_failed"
    PAYMENT_INITIATION_FAILED = "payment_initiation_failed"
    VALIDATION_FAILED = "validation_failed"


@dataclass(frozen=True)
class Companion:
    """
    Traveler record for one adult in the party.

    A freshly created row is empty; the form fills it field by field.
    """

    id: str
    name: str = ""
    family_name: str = ""
    birthday: date | None = None
    gender: str | None = None  # "male" | "female" | "other"
    country: str | None = None
    passport_number: str | None = None
    is_lead_passenger: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["birthday"] = self.birthday.isoformat() if self.birthday else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Companion":
        birthday = data.get("birthday")
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            family_name=data.get("family_name") or "",
            birthday=date.fromisoformat(birthday) if birthday else None,
            gender=data.get("gender"),
            country=data.get("country"),
            passport_number=data.get("passport_number"),
            is_lead_passenger=bool(data.get("is_lead_passenger", False)),
        )


@dataclass(frozen=True)
class BookingDraft:
    """
    Snapshot of the data accumulated by one wizard instance.

    Drafts are never mutated in place; DraftStore replaces the whole snapshot
    on every named update and bumps `version`.

    Attributes:
        selected_season_id: Season chosen on the date step
        selected_price_option_id: Stable id of the chosen room price option
        selected_room_type: Display name resolved from the price option
        selected_date: Travel date (ISO 8601), optional
        adults: Number of adults (authoritative roster size)
        kids: Number of children
        babys: Number of infants
        companions: Traveler roster, one per adult, in display order
        selected_extra_services: Extra price ids toggled on by the traveler
        payment_type: Cash or installments
        reservation_id: Set once the reservation exists server-side
        reservation_total_price: Server-computed total of that reservation
        payment_plan: Set once the payment plan exists server-side
        version: Incremented on every update
    """

    selected_season_id: str | None = None
    selected_price_option_id: str | None = None
    selected_room_type: str | None = None
    selected_date: str | None = None
    adults: int = 1
    kids: int = 0
    babys: int = 0
    companions: tuple[Companion, ...] = field(default_factory=tuple)
    selected_extra_services: tuple[str, ...] = field(default_factory=tuple)
    payment_type: PaymentType = PaymentType.CASH
    reservation_id: str | None = None
    reservation_total_price: float | None = None
    payment_plan: PaymentPlan | None = None
    version: int = 0

    @property
    def total_travelers(self) -> int:
        return self.adults + self.kids + self.babys

    @property
    def lead_passenger(self) -> Companion | None:
        leads = [c for c in self.companions if c.is_lead_passenger]
        return leads[0] if len(leads) == 1 else None
