"""
DraftStore - Holder of the accumulating booking draft.

The draft is an immutable BookingDraft snapshot. Every change goes through a
named, total update that builds a new snapshot, checks the draft invariants
at the update boundary and bumps the version:

- set_date_selection / set_travelers / set_payment_type: wizard selections
- resize_roster / set_companions / update_companion / set_lead_passenger:
  companion roster edits
- toggle_extra_service: extra services with set semantics
- commit_reservation / commit_payment_plan: saga results

Once closed (wizard teardown) the store rejects every update, so a late
backend response cannot land on a discarded draft.
"""

import logging
from dataclasses import replace
from typing import Any
from uuid import uuid4

from booking.exceptions import DraftClosedError, DraftInvariantError
from booking.models import BookingDraft, Companion, PaymentType
from booking.schemas import PaymentPlan, Reservation

logger = logging.getLogger(__name__)

COMPANION_FIELDS = frozenset(
    {"name", "family_name", "birthday", "gender", "country", "passport_number"}
)


def new_companion(is_lead_passenger: bool = False) -> Companion:
    """Create an empty roster row."""
    return Companion(id=f"companion-{uuid4().hex}", is_lead_passenger=is_lead_passenger)


class DraftStore:
    """
    Reducer-style store for one wizard's BookingDraft.

    Example:
        >>> store = DraftStore("wiz-1")
        >>> store.resize_roster(2)
        >>> len(store.draft.companions)
        2
        >>> store.draft.companions[0].is_lead_passenger
        True
    """

    def __init__(self, wizard_id: str, draft: BookingDraft | None = None) -> None:
        self._wizard_id = wizard_id
        self._draft = draft or BookingDraft()
        self._closed = False

    @property
    def draft(self) -> BookingDraft:
        """Current snapshot (immutable)."""
        return self._draft

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Discard the draft owner; later updates raise DraftClosedError."""
        self._closed = True
        logger.info(
            "Draft store closed | version=%s | wizard_id=%s",
            self._draft.version,
            self._wizard_id,
        )

    def _apply(self, operation: str, **changes: Any) -> BookingDraft:
        if self._closed:
            raise DraftClosedError(
                f"Draft of wizard {self._wizard_id} is closed; '{operation}' rejected"
            )
        self._draft = replace(self._draft, version=self._draft.version + 1, **changes)
        logger.debug(
            "Draft update: %s | version=%s | wizard_id=%s",
            operation,
            self._draft.version,
            self._wizard_id,
        )
        return self._draft

    def _ensure_unreserved(self, operation: str, changes: dict[str, Any]) -> None:
        """
        Reject changes to the reserved booking terms.

        Date, party size and payment type were sent with the reservation, so
        they are frozen once it exists. Re-applying identical values is allowed.
        """
        reservation_id = self._draft.reservation_id
        if reservation_id is None:
            return
        changed = sorted(k for k, v in changes.items() if getattr(self._draft, k) != v)
        if changed:
            raise DraftInvariantError(
                f"Draft holds reservation {reservation_id}; '{operation}' cannot change {changed}"
            )

    # ------------------------------------------------------------------
    # Wizard selections
    # ------------------------------------------------------------------

    def set_date_selection(
        self,
        season_id: str,
        price_option_id: str,
        room_type: str,
        selected_date: str | None = None,
    ) -> BookingDraft:
        changes = {
            "selected_season_id": season_id,
            "selected_price_option_id": price_option_id,
            "selected_room_type": room_type,
            "selected_date": selected_date,
        }
        self._ensure_unreserved("set_date_selection", changes)
        return self._apply("set_date_selection", **changes)

    def set_travelers(self, adults: int, kids: int, babys: int) -> BookingDraft:
        if adults < 1 or kids < 0 or babys < 0:
            raise DraftInvariantError(
                f"Invalid party size: adults={adults}, kids={kids}, babys={babys}"
            )
        changes = {"adults": adults, "kids": kids, "babys": babys}
        self._ensure_unreserved("set_travelers", changes)
        return self._apply("set_travelers", **changes)

    def set_payment_type(self, payment_type: PaymentType) -> BookingDraft:
        changes = {"payment_type": PaymentType(payment_type)}
        self._ensure_unreserved("set_payment_type", changes)
        return self._apply("set_payment_type", **changes)

    def toggle_extra_service(self, extra_id: str) -> BookingDraft:
        selected = self._draft.selected_extra_services
        if extra_id in selected:
            updated = tuple(e for e in selected if e != extra_id)
        else:
            updated = (*selected, extra_id)
        return self._apply("toggle_extra_service", selected_extra_services=updated)

    # ------------------------------------------------------------------
    # Companion roster
    # ------------------------------------------------------------------

    def resize_roster(self, adults: int) -> BookingDraft:
        """
        Grow or shrink the roster to `adults` rows.

        New rows are appended empty; the first row of an empty roster becomes
        the lead passenger. Extra rows are spliced off the end.
        """
        companions = list(self._draft.companions)
        if len(companions) > adults:
            companions = companions[: max(adults, 0)]
        while len(companions) < adults:
            companions.append(new_companion(is_lead_passenger=not companions))
        return self._apply("resize_roster", companions=tuple(companions))

    def set_companions(self, companions: list[Companion] | tuple[Companion, ...]) -> BookingDraft:
        return self._apply("set_companions", companions=tuple(companions))

    def update_companion(self, index: int, **fields: Any) -> BookingDraft:
        unknown = set(fields) - COMPANION_FIELDS
        if unknown:
            raise DraftInvariantError(f"Unknown companion fields: {sorted(unknown)}")
        companions = list(self._draft.companions)
        if not 0 <= index < len(companions):
            raise DraftInvariantError(f"Companion index {index} out of range")
        companions[index] = replace(companions[index], **fields)
        return self._apply("update_companion", companions=tuple(companions))

    def set_lead_passenger(self, index: int) -> BookingDraft:
        """Mark one row as lead passenger and clear the flag on all others."""
        companions = self._draft.companions
        if not 0 <= index < len(companions):
            raise DraftInvariantError(f"Companion index {index} out of range")
        updated = tuple(
            replace(c, is_lead_passenger=(i == index)) for i, c in enumerate(companions)
        )
        return self._apply("set_lead_passenger", companions=updated)

    # ------------------------------------------------------------------
    # Saga results
    # ------------------------------------------------------------------

    def commit_reservation(self, reservation: Reservation) -> BookingDraft:
        """
        Record the reservation created server-side.

        The id is durable: re-committing the same id is a no-op and a different
        id is rejected.
        """
        if not reservation.id:
            raise DraftInvariantError("Reservation id must be non-empty")
        current = self._draft.reservation_id
        if current == reservation.id:
            return self._draft
        if current is not None:
            raise DraftInvariantError(
                f"Draft already holds reservation {current}; refusing {reservation.id}"
            )
        logger.info(
            "Reservation committed to draft | wizard_id=%s",
            self._wizard_id,
            extra={"reservation_id": reservation.id},
        )
        return self._apply(
            "commit_reservation",
            reservation_id=reservation.id,
            reservation_total_price=reservation.total_price,
        )

    def commit_payment_plan(self, payment_plan: PaymentPlan) -> BookingDraft:
        """Record the payment plan; a reservation must already exist."""
        if self._draft.reservation_id is None:
            raise DraftInvariantError("Cannot commit a payment plan before a reservation")
        logger.info(
            "Payment plan committed to draft | wizard_id=%s",
            self._wizard_id,
            extra={
                "reservation_id": self._draft.reservation_id,
                "payment_plan_id": payment_plan.id,
            },
        )
        return self._apply("commit_payment_plan", payment_plan=payment_plan)
