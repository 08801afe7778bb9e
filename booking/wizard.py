"""
BookingWizard - Controller for one booking wizard instance.

Wires the wizard pieces together:
- WizardFSM decides which step is shown
- Step validators gate every forward transition
- DraftStore accumulates the booking draft
- ReservationSaga runs at the review step on explicit confirmation
- PaymentHandoff runs on entering the completed step

The controller owns the `is_processing` flag that blocks a second
confirmation while a saga is in flight, and `teardown()`, which cancels the
in-flight saga or handoff and closes the draft so late responses are dropped.
"""

import asyncio
import logging
from typing import Any
from uuid import uuid4

from booking.catalog import Product, find_price_option
from booking.fsm.wizard_fsm import WizardFSM
from booking.models import BookingDraft, BookingErrorKind, Direction, PaymentType, WizardStep
from booking.notifications import Notifier
from booking.services.marketplace_client import MarketplaceClient
from booking.state.draft_store import DraftStore
from booking.state.roster_cache import RosterCache
from booking.transactions.payment_handoff import HandoffResult, PaymentHandoff, Redirect
from booking.transactions.reservation_saga import ReservationSaga, SagaOutcome
from booking.validators.step_validators import (
    validate_date_step,
    validate_reservation_unchanged,
    validate_travelers_step,
)

logger = logging.getLogger(__name__)


class BookingWizard:
    """
    One traveler's pass through the booking wizard for one product.

    Example:
        >>> wizard = BookingWizard(product, client, redirect=browser.assign)
        >>> wizard.select_date("season-1", "price-double")
        >>> await wizard.set_adult_count(1)
        >>> await wizard.update_companion(0, name="Ana", family_name="López", birthday=date(1990, 5, 1))
        >>> wizard.submit_travelers(adults=1, kids=0, babys=0)
        >>> outcome = await wizard.confirm_reservation()
    """

    def __init__(
        self,
        product: Product,
        client: MarketplaceClient,
        redirect: Redirect,
        roster_cache: RosterCache | None = None,
        notifier: Notifier | None = None,
        wizard_id: str | None = None,
    ) -> None:
        self.product = product
        self.wizard_id = wizard_id or f"wizard-{uuid4().hex[:12]}"
        self.notifier = notifier or Notifier()
        self.fsm = WizardFSM(self.wizard_id)
        self.store = DraftStore(self.wizard_id)
        self.saga = ReservationSaga(client, self.notifier)
        self.handoff = PaymentHandoff(client, self.notifier, redirect)
        self.roster_cache = roster_cache

        self.is_processing = False
        self.handoff_result: HandoffResult | None = None
        self._task: asyncio.Task | None = None
        self._torn_down = False

    @property
    def step(self) -> WizardStep:
        return self.fsm.step

    @property
    def draft(self) -> BookingDraft:
        return self.store.draft

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Restore an autosaved companion roster for this product, if any."""
        if self.roster_cache is None or self.draft.companions:
            return
        companions = await self.roster_cache.load(self.product.id)
        if companions:
            self.store.set_companions(companions)
            logger.info(
                f"Restored {len(companions)} autosaved companions | wizard_id={self.wizard_id}",
                extra={"product_id": self.product.id},
            )

    async def teardown(self) -> None:
        """
        Abandon the wizard.

        Cancels the in-flight saga or handoff and closes the draft. A response
        arriving afterwards cannot mutate the discarded draft.
        """
        if self._torn_down:
            return
        self._torn_down = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.store.close()
        logger.info(
            f"Wizard torn down at step {self.step.value} | wizard_id={self.wizard_id}",
            extra={"product_id": self.product.id, "reservation_id": self.draft.reservation_id},
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_back(self) -> WizardStep:
        if self.is_processing:
            logger.warning(f"Back navigation ignored while processing | wizard_id={self.wizard_id}")
            return self.step
        return self.fsm.advance(Direction.PREVIOUS)

    def _validation_failed(self, result: dict[str, Any]) -> dict[str, Any]:
        self.notifier.error(
            BookingErrorKind.VALIDATION_FAILED,
            result["error_message"],
            productId=self.product.id,
            errorCode=result["error_code"],
        )
        return result

    # ------------------------------------------------------------------
    # Date step
    # ------------------------------------------------------------------

    def select_date(
        self,
        season_id: str | None,
        price_option_id: str | None,
        selected_date: str | None = None,
    ) -> dict[str, Any]:
        """Validate and record the season/room choice, then move to travelers."""
        result = validate_date_step(self.product, season_id, price_option_id)
        if not result["valid"]:
            return self._validation_failed(result)

        price_option = find_price_option(self.product, season_id, price_option_id)
        locked = validate_reservation_unchanged(
            self.draft,
            selected_season_id=season_id,
            selected_price_option_id=price_option.id,
            selected_room_type=price_option.room_name,
            selected_date=selected_date,
        )
        if not locked["valid"]:
            return self._validation_failed(locked)

        self.store.set_date_selection(
            season_id, price_option.id, price_option.room_name, selected_date
        )
        self.fsm.advance(Direction.NEXT)
        return result

    # ------------------------------------------------------------------
    # Travelers step
    # ------------------------------------------------------------------

    async def set_adult_count(self, adults: int) -> BookingDraft:
        """Grow or shrink the companion roster to match the adult counter."""
        self.store.resize_roster(adults)
        await self._autosave_roster()
        return self.draft

    async def update_companion(self, index: int, **fields: Any) -> BookingDraft:
        self.store.update_companion(index, **fields)
        await self._autosave_roster()
        return self.draft

    async def set_lead_passenger(self, index: int) -> BookingDraft:
        self.store.set_lead_passenger(index)
        await self._autosave_roster()
        return self.draft

    def toggle_extra_service(self, extra_id: str) -> BookingDraft:
        return self.store.toggle_extra_service(extra_id)

    def submit_travelers(self, adults: int, kids: int, babys: int) -> dict[str, Any]:
        """
        Validate the roster against the requested party size.

        On failure the draft is left untouched. Once a reservation exists the
        party size can no longer change.
        """
        locked = validate_reservation_unchanged(self.draft, adults=adults, kids=kids, babys=babys)
        if not locked["valid"]:
            return self._validation_failed(locked)

        result = validate_travelers_step(adults, self.draft.companions)
        if not result["valid"]:
            return self._validation_failed(result)

        self.store.set_travelers(adults, kids, babys)
        self.fsm.advance(Direction.NEXT)
        return result

    async def _autosave_roster(self) -> None:
        if self.roster_cache is not None:
            await self.roster_cache.save(self.product.id, self.draft.companions)

    # ------------------------------------------------------------------
    # Review step
    # ------------------------------------------------------------------

    def set_payment_type(self, payment_type: PaymentType) -> dict[str, Any]:
        """Choose cash or installments; frozen once a reservation exists."""
        payment_type = PaymentType(payment_type)
        result = validate_reservation_unchanged(self.draft, payment_type=payment_type)
        if not result["valid"]:
            return self._validation_failed(result)

        self.store.set_payment_type(payment_type)
        return result

    async def confirm_reservation(self) -> SagaOutcome | None:
        """
        Run the reservation saga from the review step.

        Returns None when the call is ignored (wrong step, saga already in
        flight, or wizard torn down).
        """
        return await self._run_saga(self.saga.execute)

    async def resume_payment_plan(self) -> SagaOutcome | None:
        """Retry payment plan generation for the reservation already created."""
        return await self._run_saga(self.saga.resume_payment_plan)

    async def _run_saga(self, operation) -> SagaOutcome | None:
        if self._torn_down:
            return None
        if self.step != WizardStep.REVIEW:
            logger.warning(
                f"Saga requested outside review step ({self.step.value}) | wizard_id={self.wizard_id}"
            )
            return None
        if self.is_processing:
            logger.warning(f"Double submit ignored | wizard_id={self.wizard_id}")
            return None

        self.is_processing = True
        try:
            outcome = await self._run_tracked(operation(self.store, self.product))
        finally:
            self.is_processing = False

        if outcome is None or outcome.abandoned:
            return outcome

        if outcome.success:
            self.fsm.go_to(outcome.next_step, reason="reservation_saga")
            await self.enter_completed()
        return outcome

    async def _run_tracked(self, coro):
        """Await `coro` as the wizard's cancellable in-flight task."""
        self._task = asyncio.ensure_future(coro)
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._torn_down:
                return None
            raise
        finally:
            self._task = None

    # ------------------------------------------------------------------
    # Completed step
    # ------------------------------------------------------------------

    async def enter_completed(self) -> HandoffResult | None:
        """
        Hand the traveler over to the payment gateway.

        Calling it again after an error retries the handoff with the same
        payment plan; no new reservation is created.
        """
        if self._torn_down or self.step != WizardStep.COMPLETED:
            return None

        result = await self._run_tracked(self.handoff.execute(self.draft, self.product))
        if result is None:
            return None

        self.handoff_result = result
        if result.redirected:
            if self.roster_cache is not None:
                await self.roster_cache.clear(self.product.id)
            self.store.close()
        return result
