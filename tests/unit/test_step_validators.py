"""
Unit tests for step validators.

Tests cover:
- Date step: season and room resolution by price option id
- Travelers step: adult count, roster size, completeness, lead passenger
- Companion field errors (advisory inline checks)
- Reserved terms: date, party size and payment type frozen after a reservation
"""

from datetime import date

import pytest

from booking.models import BookingDraft, Companion, PaymentType
from booking.validators import (
    INCOMPLETE_TRAVELERS,
    MISSING_ROOM,
    MISSING_SEASON,
    RESERVATION_LOCKED,
    companion_field_errors,
    validate_date_step,
    validate_reservation_unchanged,
    validate_travelers_step,
)


class TestValidateDateStep:
    def test_valid_selection(self, product):
        result = validate_date_step(product, "season-1", "price-double")
        assert result == {"valid": True, "error_code": None, "error_message": None}

    def test_missing_season(self, product):
        result = validate_date_step(product, None, "price-double")
        assert not result["valid"]
        assert result["error_code"] == MISSING_SEASON
        assert result["error_message"] == "Por favor selecciona una temporada"

    def test_unknown_season(self, product):
        result = validate_date_step(product, "season-404", "price-double")
        assert result["error_code"] == MISSING_SEASON

    def test_missing_room(self, product):
        result = validate_date_step(product, "season-1", None)
        assert result["error_code"] == MISSING_ROOM
        assert result["error_message"] == "Por favor selecciona un tipo de habitación"

    def test_price_option_from_another_season_counts_as_missing(self, product):
        """season-2 has no prices, so price-double cannot resolve there."""
        result = validate_date_step(product, "season-2", "price-double")
        assert result["error_code"] == MISSING_ROOM

    def test_rooms_sharing_a_name_are_distinct(self, product):
        assert validate_date_step(product, "season-1", "price-double-vista")["valid"]


class TestValidateTravelersStep:
    def test_complete_roster_is_valid(self, complete_roster):
        assert validate_travelers_step(2, complete_roster)["valid"]

    def test_zero_adults_rejected(self):
        result = validate_travelers_step(0, [])
        assert result["error_code"] == INCOMPLETE_TRAVELERS
        assert result["error_message"] == "Debe haber al menos 1 adulto"

    @pytest.mark.parametrize("adults", [1, 3, 4])
    def test_roster_size_must_match_adults(self, complete_roster, adults):
        result = validate_travelers_step(adults, complete_roster)
        assert not result["valid"]
        assert result["error_code"] == INCOMPLETE_TRAVELERS
        assert result["error_message"] == (
            f"Por favor completa la información de los {adults} adultos"
        )

    @pytest.mark.parametrize("missing", ["name", "family_name", "birthday"])
    def test_required_fields(self, make_companion, missing):
        blank = {"name": "", "family_name": "", "birthday": None}[missing]
        roster = [make_companion(0, is_lead_passenger=True, **{missing: blank})]

        result = validate_travelers_step(1, roster)

        assert result["error_message"] == (
            "Por favor completa todos los campos obligatorios de los viajeros"
        )

    def test_no_lead_passenger(self, make_companion):
        roster = [make_companion(0), make_companion(1)]
        result = validate_travelers_step(2, roster)
        assert result["error_message"] == "Por favor selecciona un viajero principal"

    def test_two_lead_passengers(self, make_companion):
        roster = [
            make_companion(0, is_lead_passenger=True),
            make_companion(1, is_lead_passenger=True),
        ]
        result = validate_travelers_step(2, roster)
        assert result["error_message"] == "Solo puede haber un viajero principal"

    def test_optional_fields_not_required(self):
        roster = [
            Companion(
                id="c-1",
                name="Ana",
                family_name="López",
                birthday=date(1990, 1, 1),
                is_lead_passenger=True,
            )
        ]
        assert validate_travelers_step(1, roster)["valid"]


class TestCompanionFieldErrors:
    TODAY = date(2026, 10, 19)

    def test_clean_row(self, make_companion):
        assert companion_field_errors(make_companion(), today=self.TODAY) == {}

    def test_empty_row_reports_required_fields(self):
        errors = companion_field_errors(Companion(id="c-1"), today=self.TODAY)
        assert set(errors) == {"name", "family_name", "birthday"}

    def test_short_names(self, make_companion):
        errors = companion_field_errors(
            make_companion(name="A", family_name=" B "), today=self.TODAY
        )
        assert errors["name"] == "El nombre debe tener al menos 2 caracteres"
        assert errors["family_name"] == "El apellido debe tener al menos 2 caracteres"

    def test_minor_rejected(self, make_companion):
        errors = companion_field_errors(
            make_companion(birthday=date(2008, 10, 20)), today=self.TODAY
        )
        assert errors["birthday"] == "El acompañante debe ser mayor de 18 años"

    def test_eighteenth_birthday_is_adult(self, make_companion):
        errors = companion_field_errors(
            make_companion(birthday=date(2008, 10, 19)), today=self.TODAY
        )
        assert "birthday" not in errors

    def test_implausible_age(self, make_companion):
        errors = companion_field_errors(
            make_companion(birthday=date(1890, 1, 1)), today=self.TODAY
        )
        assert errors["birthday"] == "Fecha de nacimiento inválida"

    def test_passport_required_for_international(self, make_companion):
        errors = companion_field_errors(
            make_companion(passport_number="AB1"), international=True, today=self.TODAY
        )
        assert "passport_number" in errors

    def test_passport_ok_for_international(self, make_companion):
        errors = companion_field_errors(
            make_companion(passport_number="G12345678"), international=True, today=self.TODAY
        )
        assert errors == {}

    def test_passport_not_required_for_domestic(self, make_companion):
        assert companion_field_errors(make_companion(), today=self.TODAY) == {}


class TestValidateReservationUnchanged:
    @pytest.fixture
    def reserved_draft(self):
        return BookingDraft(adults=1, reservation_id="R1", selected_date="2026-06-01")

    def test_no_reservation_allows_changes(self):
        result = validate_reservation_unchanged(BookingDraft(), adults=3)
        assert result["valid"]

    def test_same_values_allowed(self, reserved_draft):
        result = validate_reservation_unchanged(
            reserved_draft, adults=1, kids=0, payment_type=PaymentType.CASH
        )
        assert result["valid"]

    @pytest.mark.parametrize(
        "changes",
        [
            {"adults": 3},
            {"payment_type": PaymentType.INSTALLMENTS},
            {"selected_date": "2026-07-01"},
        ],
    )
    def test_changed_terms_rejected(self, reserved_draft, changes):
        result = validate_reservation_unchanged(reserved_draft, **changes)
        assert not result["valid"]
        assert result["error_code"] == RESERVATION_LOCKED
        assert "#R1" in result["error_message"]
