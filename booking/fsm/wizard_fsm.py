"""
WizardFSM - Finite State Machine for the booking wizard steps.

The wizard is strictly linear: date -> travelers -> review -> payment ->
completed. The FSM only tracks which step is current; all booking data lives
in the DraftStore.

Key responsibilities:
- Resolve "next"/"previous" against the step order, clamping at both ends
- Allow the reservation saga to jump directly to a step
- Serialize the current step for snapshots
- Log all transitions for debugging and monitoring
"""

import logging
from datetime import UTC, datetime
from typing import Any, ClassVar

from booking.models import Direction, WizardStep

logger = logging.getLogger(__name__)


class WizardFSM:
    """
    Finite State Machine controller for booking wizard navigation.

    Attributes:
        wizard_id: Identifier of the wizard instance (used in logs)
        step: Current wizard step

    Example:
        >>> fsm = WizardFSM("wiz-123")
        >>> fsm.advance(Direction.NEXT)
        <WizardStep.TRAVELERS: 'travelers'>
        >>> fsm.advance(Direction.PREVIOUS)
        <WizardStep.DATE: 'date'>
        >>> fsm.advance(Direction.PREVIOUS)  # clamped, no error
        <WizardStep.DATE: 'date'>
    """

    STEP_ORDER: ClassVar[tuple[WizardStep, ...]] = (
        WizardStep.DATE,
        WizardStep.TRAVELERS,
        WizardStep.REVIEW,
        WizardStep.PAYMENT,
        WizardStep.COMPLETED,
    )

    def __init__(self, wizard_id: str, step: WizardStep = WizardStep.DATE) -> None:
        self._wizard_id = wizard_id
        self._step = step
        self._last_updated = datetime.now(UTC)

    @property
    def wizard_id(self) -> str:
        return self._wizard_id

    @property
    def step(self) -> WizardStep:
        """Get current wizard step."""
        return self._step

    @property
    def is_initial(self) -> bool:
        return self._step == self.STEP_ORDER[0]

    @property
    def is_terminal(self) -> bool:
        return self._step == self.STEP_ORDER[-1]

    @classmethod
    def resolve(cls, step: WizardStep, direction: Direction) -> WizardStep:
        """
        Total transition function (step, direction) -> step.

        Requests past either end of the order return `step` unchanged.
        """
        index = cls.STEP_ORDER.index(step)
        if direction == Direction.NEXT:
            index = min(index + 1, len(cls.STEP_ORDER) - 1)
        else:
            index = max(index - 1, 0)
        return cls.STEP_ORDER[index]

    def advance(self, direction: Direction) -> WizardStep:
        """
        Move one step in the given direction.

        Idempotent at the boundaries: "next" from completed and "previous"
        from date leave the step unchanged.

        Returns:
            The step after the move
        """
        target = self.resolve(self._step, direction)
        if target == self._step:
            logger.debug(
                "Wizard navigation clamped: %s | direction=%s | wizard_id=%s",
                self._step.value,
                direction.value,
                self._wizard_id,
            )
            return self._step
        return self.go_to(target, reason=direction.value)

    def go_to(self, step: WizardStep, reason: str = "jump") -> WizardStep:
        """Jump directly to a step (used by the reservation saga)."""
        from_step = self._step
        self._step = step
        self._last_updated = datetime.now(UTC)

        logger.info(
            "Wizard transition: %s -> %s | reason=%s | wizard_id=%s",
            from_step.value,
            step.value,
            reason,
            self._wizard_id,
            extra={"wizard_step": step.value},
        )
        return self._step

    def reset(self) -> None:
        """Return to the first step."""
        self.go_to(self.STEP_ORDER[0], reason="reset")

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self._step.value,
            "last_updated": self._last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, wizard_id: str, data: dict[str, Any]) -> "WizardFSM":
        """
        Restore a FSM from a snapshot.

        An unknown or missing step falls back to the first step.
        """
        raw_step = data.get("step")
        try:
            step = WizardStep(raw_step)
        except ValueError:
            logger.warning(
                "Invalid wizard step in snapshot: %r, falling back to %s | wizard_id=%s",
                raw_step,
                cls.STEP_ORDER[0].value,
                wizard_id,
            )
            step = cls.STEP_ORDER[0]

        fsm = cls(wizard_id, step)

        last_updated = data.get("last_updated")
        if last_updated:
            try:
                fsm._last_updated = datetime.fromisoformat(last_updated)
            except (ValueError, TypeError):
                logger.warning(
                    "Malformed last_updated in snapshot: %r | wizard_id=%s",
                    last_updated,
                    wizard_id,
                )
        return fsm
