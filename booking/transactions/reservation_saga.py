"""
Reservation Saga for the booking wizard.

This module implements the forward-only booking saga run when the traveler
confirms the review step:

1. Availability check (nothing is created server-side yet)
2. Reservation creation (durable side effect, committed to the draft at once)
3. Payment plan generation for the reservation's server-computed total
4. Finalization (success notification, wizard moves to completed)

Key design points:
- Each step is a function returning a StepResult; a failed result
  short-circuits the remaining steps, so step 3 cannot run without the
  reservation produced by step 2 in the same run
- No compensation: a failure never undoes an earlier step. A reservation
  whose payment plan failed stays on the server for support to reconcile
- No retries and no client-side timeouts
- Failures never escape as exceptions; they become a SagaOutcome plus one
  kind-specific notification

ReservationSaga.resume_payment_plan() re-runs step 3 alone for a draft that
already holds a reservation, without creating a second one.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Generic, TypeVar
from uuid import uuid4

from booking.catalog import Product
from booking.exceptions import DraftClosedError
from booking.models import BookingDraft, BookingErrorKind, WizardStep
from booking.notifications import NotificationLevel, Notifier
from booking.schemas import (
    AvailabilityResult,
    PaymentPlan,
    PaymentPlanInput,
    Reservation,
    ReservationInput,
)
from booking.services.marketplace_client import MarketplaceClient
from booking.state.draft_store import DraftStore
from shared.config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNAVAILABLE_MESSAGE = "No hay disponibilidad"
RESERVATION_FAILED_MESSAGE = "Error al procesar la reserva. Por favor intenta de nuevo."
PAYMENT_PLAN_FAILED_MESSAGE = (
    "Reservación creada pero hubo un problema al generar el plan de pago. "
    "Contacta a soporte."
)
SUCCESS_MESSAGE = "Reservación y plan de pago creados exitosamente"


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """Success value or tagged failure of one saga step."""

    value: T | None = None
    error_kind: BookingErrorKind | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: T) -> "StepResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: BookingErrorKind, message: str) -> "StepResult[T]":
        return cls(error_kind=kind, error_message=message)


@dataclass(frozen=True)
class SagaOutcome:
    """
    Result of one saga run.

    Attributes:
        success: Both reservation and payment plan exist
        next_step: Step the wizard must show (review on failure, completed on success)
        error_kind: Failure kind, None on success
        error_message: Message shown to the traveler
        reservation_id: Reservation held by the draft after the run (may be set on failure)
        payment_plan: Payment plan held by the draft after the run
        abandoned: The wizard was torn down mid-run; nothing was shown
    """

    success: bool
    next_step: WizardStep
    error_kind: BookingErrorKind | None = None
    error_message: str | None = None
    reservation_id: str | None = None
    payment_plan: PaymentPlan | None = None
    abandoned: bool = False


class ReservationSaga:
    """
    Forward-only saga: availability -> reservation -> payment plan.

    Example:
        >>> saga = ReservationSaga(MarketplaceClient(), Notifier())
        >>> outcome = await saga.execute(store, product)
        >>> if outcome.success:
        ...     fsm.go_to(outcome.next_step)
    """

    def __init__(self, client: MarketplaceClient, notifier: Notifier) -> None:
        self.client = client
        self.notifier = notifier
        self.settings = get_settings()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def execute(self, store: DraftStore, product: Product) -> SagaOutcome:
        """
        Run the saga for the current draft.

        A draft that already holds a reservation never creates another one:
        with no payment plan yet it resumes at payment plan generation, with a
        plan it finalizes directly.
        """
        draft = store.draft
        if draft.reservation_id is not None:
            if draft.payment_plan is not None:
                logger.info(
                    "Saga skipped: draft already holds reservation and payment plan",
                    extra={
                        "product_id": product.id,
                        "reservation_id": draft.reservation_id,
                        "payment_plan_id": draft.payment_plan.id,
                    },
                )
                return self._finalize(draft, product)
            return await self.resume_payment_plan(store, product)

        trace_id = f"{product.id}_{uuid4().hex[:8]}"
        travel_date = draft.selected_date or datetime.now(UTC).isoformat()

        logger.info(
            f"[{trace_id}] Starting reservation saga",
            extra={
                "trace_id": trace_id,
                "product_id": product.id,
                "adults": draft.adults,
                "kids": draft.kids,
                "babys": draft.babys,
            },
        )

        # Step 1: Availability
        availability = await self._check_availability(draft, product, trace_id)
        if store.closed:
            return self._abandoned(store, trace_id)
        if not availability.ok:
            return self._fail(store, availability, product, trace_id)

        # Step 2: Reservation
        reservation_result = await self._create_reservation(draft, product, travel_date, trace_id)
        if store.closed:
            return self._abandoned(store, trace_id)
        if not reservation_result.ok:
            return self._fail(store, reservation_result, product, trace_id)

        reservation = reservation_result.value
        try:
            store.commit_reservation(reservation)
        except DraftClosedError:
            return self._abandoned(store, trace_id)

        # Step 3: Payment plan
        plan_result = await self._generate_payment_plan(
            store.draft,
            product,
            reservation.id,
            reservation.total_price or 0.0,
            travel_date,
            trace_id,
        )
        return self._complete(store, plan_result, product, trace_id)

    async def resume_payment_plan(self, store: DraftStore, product: Product) -> SagaOutcome:
        """
        Re-run payment plan generation for the draft's existing reservation.

        Never creates a reservation. Without one, fails locally with
        PAYMENT_PLAN_FAILED and makes no request.
        """
        draft = store.draft
        trace_id = f"{product.id}_{uuid4().hex[:8]}"

        if draft.reservation_id is None:
            logger.warning(
                f"[{trace_id}] Payment plan resume requested without a reservation",
                extra={"trace_id": trace_id, "product_id": product.id},
            )
            return self._fail(
                store,
                StepResult.failure(
                    BookingErrorKind.PAYMENT_PLAN_FAILED,
                    "No hay una reservación para generar el plan de pago",
                ),
                product,
                trace_id,
            )

        logger.info(
            f"[{trace_id}] Resuming payment plan generation",
            extra={
                "trace_id": trace_id,
                "product_id": product.id,
                "reservation_id": draft.reservation_id,
            },
        )

        travel_date = draft.selected_date or datetime.now(UTC).isoformat()
        plan_result = await self._generate_payment_plan(
            draft,
            product,
            draft.reservation_id,
            draft.reservation_total_price or 0.0,
            travel_date,
            trace_id,
        )
        return self._complete(store, plan_result, product, trace_id)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _check_availability(
        self, draft: BookingDraft, product: Product, trace_id: str
    ) -> StepResult[AvailabilityResult]:
        try:
            response = await self.client.check_availability(
                product.id, draft.adults, draft.kids
            )
        except Exception as e:
            logger.error(
                f"[{trace_id}] Unexpected error checking availability",
                extra={"trace_id": trace_id, "error": str(e)},
                exc_info=True,
            )
            return StepResult.failure(BookingErrorKind.UNAVAILABLE, UNAVAILABLE_MESSAGE)

        if not response.success or response.data is None or not response.data.available:
            message = (response.data.message if response.data else None) or UNAVAILABLE_MESSAGE
            logger.warning(
                f"[{trace_id}] Availability check failed: {message}",
                extra={"trace_id": trace_id, "error": response.error},
            )
            return StepResult.failure(BookingErrorKind.UNAVAILABLE, message)

        logger.info(f"[{trace_id}] Step 1/3 completed - availability confirmed")
        return StepResult.success(response.data)

    async def _create_reservation(
        self, draft: BookingDraft, product: Product, travel_date: str, trace_id: str
    ) -> StepResult[Reservation]:
        # Prices are computed server-side; no season, price id or amount is sent
        reservation_input = ReservationInput(
            adults=draft.adults,
            kids=draft.kids,
            babys=draft.babys,
            experience_id=product.id,
            collection_type=product.product_type or self.settings.DEFAULT_COLLECTION_TYPE,
            reservation_date=travel_date,
            type=draft.payment_type.value,
        )

        try:
            response = await self.client.create_reservation(reservation_input)
        except Exception as e:
            logger.error(
                f"[{trace_id}] Unexpected error creating reservation",
                extra={"trace_id": trace_id, "error": str(e)},
                exc_info=True,
            )
            return StepResult.failure(BookingErrorKind.RESERVATION_FAILED, RESERVATION_FAILED_MESSAGE)

        if not response.success or response.data is None or not response.data.id:
            logger.error(
                f"[{trace_id}] Reservation creation failed: {response.error}",
                extra={"trace_id": trace_id},
            )
            message = RESERVATION_FAILED_MESSAGE
            if response.error:
                message = f"{message} ({response.error})"
            return StepResult.failure(BookingErrorKind.RESERVATION_FAILED, message)

        reservation = response.data
        logger.info(
            f"[{trace_id}] Step 2/3 completed - reservation created",
            extra={
                "trace_id": trace_id,
                "reservation_id": reservation.id,
                "total_price": reservation.total_price,
                "status": reservation.status,
            },
        )
        return StepResult.success(reservation)

    async def _generate_payment_plan(
        self,
        draft: BookingDraft,
        product: Product,
        reservation_id: str,
        total_cost: float,
        travel_date: str,
        trace_id: str,
    ) -> StepResult[PaymentPlan]:
        plan_input = PaymentPlanInput(
            product_id=product.id,
            total_cost=total_cost or 0.0,
            travel_date=travel_date,
            currency=self.settings.DEFAULT_CURRENCY,
            payment_type_selected=draft.payment_type.value,
        )

        try:
            response = await self.client.generate_payment_plan(plan_input)
        except Exception as e:
            logger.error(
                f"[{trace_id}] Unexpected error generating payment plan",
                extra={"trace_id": trace_id, "reservation_id": reservation_id, "error": str(e)},
                exc_info=True,
            )
            return StepResult.failure(BookingErrorKind.PAYMENT_PLAN_FAILED, PAYMENT_PLAN_FAILED_MESSAGE)

        if not response.success or response.data is None:
            # Reservation already exists server-side and is kept
            logger.error(
                f"[{trace_id}] Reservation created but payment plan failed: {response.error}",
                extra={"trace_id": trace_id, "reservation_id": reservation_id},
            )
            return StepResult.failure(BookingErrorKind.PAYMENT_PLAN_FAILED, PAYMENT_PLAN_FAILED_MESSAGE)

        plan = response.data
        logger.info(
            f"[{trace_id}] Step 3/3 completed - payment plan generated",
            extra={
                "trace_id": trace_id,
                "reservation_id": reservation_id,
                "payment_plan_id": plan.id,
                "total_cost": plan.total_cost,
                "payment_type_selected": plan.payment_type_selected,
            },
        )
        return StepResult.success(plan)

    # ------------------------------------------------------------------
    # Outcomes
    # ------------------------------------------------------------------

    def _complete(
        self,
        store: DraftStore,
        plan_result: StepResult[PaymentPlan],
        product: Product,
        trace_id: str,
    ) -> SagaOutcome:
        if store.closed:
            return self._abandoned(store, trace_id)
        if not plan_result.ok:
            return self._fail(store, plan_result, product, trace_id)
        try:
            store.commit_payment_plan(plan_result.value)
        except DraftClosedError:
            return self._abandoned(store, trace_id)
        return self._finalize(store.draft, product)

    def _finalize(self, draft: BookingDraft, product: Product) -> SagaOutcome:
        self.notifier.success(
            SUCCESS_MESSAGE,
            reservationId=draft.reservation_id,
            paymentPlanId=draft.payment_plan.id,
            productId=product.id,
            totalPrice=draft.reservation_total_price,
        )
        return SagaOutcome(
            success=True,
            next_step=WizardStep.COMPLETED,
            reservation_id=draft.reservation_id,
            payment_plan=draft.payment_plan,
        )

    def _fail(
        self,
        store: DraftStore,
        result: StepResult,
        product: Product,
        trace_id: str,
    ) -> SagaOutcome:
        draft = store.draft
        level = (
            NotificationLevel.WARNING
            if result.error_kind == BookingErrorKind.PAYMENT_PLAN_FAILED
            else NotificationLevel.ERROR
        )
        self.notifier.error(
            result.error_kind,
            result.error_message,
            level=level,
            productId=product.id,
            reservationId=draft.reservation_id,
            traceId=trace_id,
        )
        return SagaOutcome(
            success=False,
            next_step=WizardStep.REVIEW,
            error_kind=result.error_kind,
            error_message=result.error_message,
            reservation_id=draft.reservation_id,
            payment_plan=draft.payment_plan,
        )

    def _abandoned(self, store: DraftStore, trace_id: str) -> SagaOutcome:
        logger.info(
            f"[{trace_id}] Wizard torn down mid-saga; discarding late result",
            extra={"trace_id": trace_id},
        )
        return SagaOutcome(
            success=False,
            next_step=WizardStep.REVIEW,
            reservation_id=store.draft.reservation_id,
            abandoned=True,
        )
