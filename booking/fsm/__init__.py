"""
FSM module for booking wizard navigation.

Public exports:
    - WizardFSM: Linear step controller with clamped navigation
    - WizardStep: Enum of wizard steps
    - Direction: Navigation direction
"""

from booking.fsm.wizard_fsm import WizardFSM
from booking.models import Direction, WizardStep

__all__ = [
    "Direction",
    "WizardFSM",
    "WizardStep",
]
