"""
Step Validators for the booking wizard.

Pure, side-effect-free checks that gate each forward transition of the wizard.
Every validator returns a result dict instead of raising, so callers can turn
a failure into a notification without touching the draft:

    {
        "valid": bool,
        "error_code": str | None,
        "error_message": str | None,
    }

The review step has no validator: the backend's own rejection of the
reservation is the signal there.
"""

from collections.abc import Sequence
from datetime import date
from typing import Any

from booking.catalog import Product, find_price_option, find_season
from booking.models import BookingDraft, Companion

MISSING_SEASON = "MISSING_SEASON"
MISSING_ROOM = "MISSING_ROOM"
INCOMPLETE_TRAVELERS = "INCOMPLETE_TRAVELERS"
RESERVATION_LOCKED = "RESERVATION_LOCKED"

MIN_NAME_LENGTH = 2
MIN_PASSPORT_LENGTH = 5
MIN_COMPANION_AGE = 18
MAX_COMPANION_AGE = 120


def _valid() -> dict[str, Any]:
    return {"valid": True, "error_code": None, "error_message": None}


def _invalid(error_code: str, error_message: str) -> dict[str, Any]:
    return {"valid": False, "error_code": error_code, "error_message": error_message}


def validate_date_step(
    product: Product,
    season_id: str | None,
    price_option_id: str | None,
) -> dict[str, Any]:
    """
    Validate the date step: a season and a room of that season are chosen.

    The room type is resolved by looking the price option id up inside the
    chosen season; an id belonging to another season counts as missing.

    Args:
        product: Catalog product being booked
        season_id: Selected season id
        price_option_id: Selected room price option id

    Returns:
        Result dict; error_code is MISSING_SEASON or MISSING_ROOM on failure

    Example:
        >>> validate_date_step(product, "season-1", None)
        {"valid": False, "error_code": "MISSING_ROOM", "error_message": "..."}
    """
    if find_season(product, season_id) is None:
        return _invalid(MISSING_SEASON, "Por favor selecciona una temporada")

    if find_price_option(product, season_id, price_option_id) is None:
        return _invalid(MISSING_ROOM, "Por favor selecciona un tipo de habitación")

    return _valid()


def validate_travelers_step(adults: int, companions: Sequence[Companion]) -> dict[str, Any]:
    """
    Validate the travelers step.

    Checks, in order:
    - at least one adult
    - one companion per adult
    - every companion has name, family name and birthday
    - exactly one lead passenger

    Each check has its own message; all share the INCOMPLETE_TRAVELERS code.

    Args:
        adults: Number of adults in the party
        companions: Current roster

    Returns:
        Result dict
    """
    if adults < 1:
        return _invalid(INCOMPLETE_TRAVELERS, "Debe haber al menos 1 adulto")

    if len(companions) != adults:
        return _invalid(
            INCOMPLETE_TRAVELERS,
            f"Por favor completa la información de los {adults} adultos",
        )

    if any(not c.name or not c.family_name or not c.birthday for c in companions):
        return _invalid(
            INCOMPLETE_TRAVELERS,
            "Por favor completa todos los campos obligatorios de los viajeros",
        )

    lead_count = sum(1 for c in companions if c.is_lead_passenger)
    if lead_count == 0:
        return _invalid(INCOMPLETE_TRAVELERS, "Por favor selecciona un viajero principal")
    if lead_count > 1:
        return _invalid(INCOMPLETE_TRAVELERS, "Solo puede haber un viajero principal")

    return _valid()


def _age_on(birthday: date, today: date) -> int:
    years = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        years -= 1
    return years


def companion_field_errors(
    companion: Companion,
    international: bool = False,
    today: date | None = None,
) -> dict[str, str]:
    """
    Per-field errors for inline display on the companion form.

    These are advisory and do not gate the travelers step.

    Args:
        companion: Companion row to check
        international: Whether a passport is required
        today: Reference date for the age check (defaults to today)

    Returns:
        Mapping of field name to error message; empty when the row is clean
    """
    today = today or date.today()
    errors: dict[str, str] = {}

    if len(companion.name.strip()) < MIN_NAME_LENGTH:
        errors["name"] = "El nombre debe tener al menos 2 caracteres"

    if len(companion.family_name.strip()) < MIN_NAME_LENGTH:
        errors["family_name"] = "El apellido debe tener al menos 2 caracteres"

    if companion.birthday is None:
        errors["birthday"] = "La fecha de nacimiento es requerida"
    else:
        age = _age_on(companion.birthday, today)
        if age < MIN_COMPANION_AGE:
            errors["birthday"] = "El acompañante debe ser mayor de 18 años"
        elif age > MAX_COMPANION_AGE:
            errors["birthday"] = "Fecha de nacimiento inválida"

    passport = (companion.passport_number or "").strip()
    if international and len(passport) < MIN_PASSPORT_LENGTH:
        errors["passport_number"] = (
            "El pasaporte es requerido para viajes internacionales (mínimo 5 caracteres)"
        )

    return errors


def validate_reservation_unchanged(draft: BookingDraft, **changes: Any) -> dict[str, Any]:
    """
    Reject edits to terms already sent with an existing reservation.

    Date, party size and payment type are frozen once the reservation exists;
    submitting the same values again is allowed.

    Args:
        draft: Current booking draft
        **changes: Draft fields the caller is about to set

    Returns:
        Result dict; error_code is RESERVATION_LOCKED on failure
    """
    if draft.reservation_id is None:
        return _valid()

    if all(getattr(draft, name) == value for name, value in changes.items()):
        return _valid()

    return _invalid(
        RESERVATION_LOCKED,
        f"La reserva #{draft.reservation_id} ya fue creada. Para cambiar fechas, "
        f"viajeros o forma de pago, contacta a soporte.",
    )
