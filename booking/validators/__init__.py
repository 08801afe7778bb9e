"""
Step Validators for the booking wizard.

Validators:
- validate_date_step: Season and room chosen before the travelers step
- validate_travelers_step: Roster size, completeness and single lead passenger
- companion_field_errors: Inline per-field errors for one companion
- validate_reservation_unchanged: Reserved terms frozen once a reservation exists
"""

from booking.validators.step_validators import (
    INCOMPLETE_TRAVELERS,
    MISSING_ROOM,
    MISSING_SEASON,
    RESERVATION_LOCKED,
    companion_field_errors,
    validate_date_step,
    validate_reservation_unchanged,
    validate_travelers_step,
)

__all__ = [
    "INCOMPLETE_TRAVELERS",
    "MISSING_ROOM",
    "MISSING_SEASON",
    "RESERVATION_LOCKED",
    "companion_field_errors",
    "validate_date_step",
    "validate_reservation_unchanged",
    "validate_travelers_step",
]
