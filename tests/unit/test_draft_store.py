"""
Unit tests for DraftStore - versioned booking draft updates.

Tests cover:
- Named updates produce new snapshots and bump the version
- Roster resize (append empty rows, splice extras, first row is lead)
- Companion edits and lead passenger selection
- Extra services toggle
- Reservation / payment plan commits and their invariants
- Closed store rejects every update
"""

import pytest

from booking.exceptions import DraftClosedError, DraftInvariantError
from booking.models import BookingDraft, PaymentType
from booking.schemas import PaymentPlan, Reservation
from booking.state import DraftStore, new_companion


@pytest.fixture
def store():
    return DraftStore("wiz-test")


@pytest.fixture
def plan():
    return PaymentPlan(id="P1", total_cost=1000.0, currency="MXN", cash_final_amount=950.0)


class TestSnapshots:
    def test_initial_draft(self, store):
        draft = store.draft
        assert draft == BookingDraft()
        assert draft.adults == 1
        assert draft.companions == ()
        assert draft.payment_type == PaymentType.CASH
        assert draft.version == 0

    def test_update_returns_new_snapshot(self, store):
        before = store.draft
        after = store.set_date_selection("season-1", "price-double", "Doble")

        assert after is not before
        assert before.selected_season_id is None
        assert after.selected_season_id == "season-1"
        assert after.selected_price_option_id == "price-double"
        assert after.selected_room_type == "Doble"
        assert after.version == before.version + 1

    def test_set_travelers(self, store):
        draft = store.set_travelers(2, 1, 1)
        assert (draft.adults, draft.kids, draft.babys) == (2, 1, 1)
        assert draft.total_travelers == 4

    @pytest.mark.parametrize("adults,kids,babys", [(0, 0, 0), (1, -1, 0), (1, 0, -2)])
    def test_set_travelers_rejects_invalid_party(self, store, adults, kids, babys):
        with pytest.raises(DraftInvariantError):
            store.set_travelers(adults, kids, babys)
        assert store.draft.version == 0

    def test_set_payment_type(self, store):
        assert store.set_payment_type(PaymentType.INSTALLMENTS).payment_type == "PLAZOS"

    def test_toggle_extra_service(self, store):
        store.toggle_extra_service("extra-tour")
        store.toggle_extra_service("extra-transfer")
        assert store.draft.selected_extra_services == ("extra-tour", "extra-transfer")

        store.toggle_extra_service("extra-tour")
        assert store.draft.selected_extra_services == ("extra-transfer",)


class TestRoster:
    def test_new_companion_is_empty(self):
        companion = new_companion()
        assert companion.id.startswith("companion-")
        assert companion.name == ""
        assert companion.birthday is None
        assert not companion.is_lead_passenger

    def test_grow_from_empty_marks_first_row_lead(self, store):
        draft = store.resize_roster(3)
        assert len(draft.companions) == 3
        assert [c.is_lead_passenger for c in draft.companions] == [True, False, False]
        assert len({c.id for c in draft.companions}) == 3

    def test_grow_keeps_existing_rows(self, store):
        store.resize_roster(1)
        store.update_companion(0, name="Ana")
        draft = store.resize_roster(2)

        assert draft.companions[0].name == "Ana"
        assert draft.companions[1].name == ""
        assert not draft.companions[1].is_lead_passenger

    def test_shrink_splices_from_end(self, store):
        store.resize_roster(3)
        first_two = store.draft.companions[:2]
        draft = store.resize_roster(2)
        assert draft.companions == first_two

    def test_resize_does_not_touch_adult_count(self, store):
        store.resize_roster(3)
        assert store.draft.adults == 1

    def test_update_companion_fields(self, store):
        store.resize_roster(1)
        draft = store.update_companion(0, name="Ana", family_name="López", country="MX")
        assert draft.companions[0].name == "Ana"
        assert draft.companions[0].country == "MX"

    def test_update_companion_unknown_field(self, store):
        store.resize_roster(1)
        with pytest.raises(DraftInvariantError, match="Unknown companion fields"):
            store.update_companion(0, is_lead_passenger=False)

    def test_update_companion_bad_index(self, store):
        with pytest.raises(DraftInvariantError, match="out of range"):
            store.update_companion(0, name="Ana")

    def test_set_lead_passenger_is_exclusive(self, store):
        store.resize_roster(3)
        draft = store.set_lead_passenger(2)
        assert [c.is_lead_passenger for c in draft.companions] == [False, False, True]
        assert draft.lead_passenger == draft.companions[2]

    def test_set_companions(self, store, complete_roster):
        draft = store.set_companions(complete_roster)
        assert draft.companions == tuple(complete_roster)


class TestCommitReservation:
    def test_commit_sets_id_and_total(self, store):
        draft = store.commit_reservation(Reservation(id="R1", total_price=1000.0))
        assert draft.reservation_id == "R1"
        assert draft.reservation_total_price == 1000.0

    def test_empty_id_rejected(self, store):
        with pytest.raises(DraftInvariantError):
            store.commit_reservation(Reservation(id=""))
        assert store.draft.reservation_id is None

    def test_same_id_is_noop(self, store):
        store.commit_reservation(Reservation(id="R1", total_price=1000.0))
        version = store.draft.version
        store.commit_reservation(Reservation(id="R1", total_price=1000.0))
        assert store.draft.version == version

    def test_different_id_rejected(self, store):
        store.commit_reservation(Reservation(id="R1"))
        with pytest.raises(DraftInvariantError, match="already holds reservation R1"):
            store.commit_reservation(Reservation(id="R2"))
        assert store.draft.reservation_id == "R1"

    def test_later_updates_keep_reservation(self, store):
        store.commit_reservation(Reservation(id="R1"))
        store.set_payment_type(PaymentType.CASH)
        store.toggle_extra_service("extra-tour")
        assert store.draft.reservation_id == "R1"


class TestReservedTerms:
    @pytest.fixture
    def reserved(self, store):
        store.set_date_selection("season-1", "price-double", "Doble", "2026-06-01")
        store.set_travelers(1, 0, 0)
        store.commit_reservation(Reservation(id="R1", total_price=1000.0))
        return store

    def test_party_size_frozen(self, reserved):
        before = reserved.draft
        with pytest.raises(DraftInvariantError, match="reservation R1.*adults"):
            reserved.set_travelers(3, 0, 0)
        assert reserved.draft is before

    def test_payment_type_frozen(self, reserved):
        with pytest.raises(DraftInvariantError, match="payment_type"):
            reserved.set_payment_type(PaymentType.INSTALLMENTS)
        assert reserved.draft.payment_type == PaymentType.CASH

    def test_date_frozen(self, reserved):
        with pytest.raises(DraftInvariantError, match="selected_date"):
            reserved.set_date_selection("season-1", "price-double", "Doble", "2026-07-01")
        assert reserved.draft.selected_date == "2026-06-01"

    def test_same_values_allowed(self, reserved):
        reserved.set_date_selection("season-1", "price-double", "Doble", "2026-06-01")
        reserved.set_travelers(1, 0, 0)
        reserved.set_payment_type("CONTADO")
        assert reserved.draft.reservation_id == "R1"


class TestCommitPaymentPlan:
    def test_requires_reservation(self, store, plan):
        with pytest.raises(DraftInvariantError):
            store.commit_payment_plan(plan)
        assert store.draft.payment_plan is None

    def test_commit_after_reservation(self, store, plan):
        store.commit_reservation(Reservation(id="R1"))
        draft = store.commit_payment_plan(plan)
        assert draft.payment_plan == plan
        assert draft.reservation_id == "R1"


class TestClosedStore:
    def test_closed_store_rejects_updates(self, store):
        store.close()
        assert store.closed
        with pytest.raises(DraftClosedError):
            store.set_travelers(2, 0, 0)
        with pytest.raises(DraftClosedError):
            store.commit_reservation(Reservation(id="R1"))

    def test_closed_store_keeps_last_snapshot(self, store):
        store.set_travelers(2, 0, 0)
        snapshot = store.draft
        store.close()
        assert store.draft is snapshot
