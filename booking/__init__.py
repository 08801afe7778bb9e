"""
Marketplace booking wizard.

- BookingWizard: controller wiring the wizard FSM, validators, draft store,
  reservation saga and payment handoff for one booking
"""

from booking.wizard import BookingWizard

__all__ = ["BookingWizard"]
