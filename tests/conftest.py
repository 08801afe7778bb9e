"""
Test configuration and fixtures.

This module sets up test environment and provides shared fixtures for all tests.
"""

import os
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

# Override service URLs for tests to use localhost instead of Docker hostnames
# Must be set BEFORE any imports of shared.config
os.environ["REDIS_URL"] = "redis://localhost:6379/0"
os.environ["MARKETPLACE_API_URL"] = "http://marketplace.test/api"
os.environ["MARKETPLACE_API_TOKEN"] = "test-token"

from booking.catalog import ExtraPrice, PriceOption, Product, Season  # noqa: E402
from booking.models import Companion  # noqa: E402
from booking.notifications import Notifier  # noqa: E402
from booking.schemas import (  # noqa: E402
    ActionResponse,
    AvailabilityResult,
    CheckoutSession,
    PaymentPlan,
    Reservation,
)
from booking.state.draft_store import DraftStore  # noqa: E402

CHECKOUT_URL = "https://pay.example.com/checkout/cs_test_123"


# ============================================================================
# Catalog
# ============================================================================


@pytest.fixture
def product():
    """Circuit product with one season, two rooms sharing a name, one extra."""
    return Product(
        id="prod-1",
        name="Circuito Europa Clásica",
        product_type="circuit",
        seasons=[
            Season(
                id="season-1",
                start_date="2026-06-01",
                end_date="2026-06-15",
                number_of_nights="14",
                allotment=20,
                allotment_remain=8,
                prices=[
                    PriceOption(id="price-double", room_name="Doble", price=12000.0, max_adult=2),
                    PriceOption(id="price-double-vista", room_name="Doble", price=13500.0, max_adult=2),
                    PriceOption(id="price-single", room_name="Sencilla", price=15000.0, max_adult=1),
                ],
                extra_prices=[
                    ExtraPrice(id="extra-tour", room_name="Tour nocturno", price=500.0),
                    ExtraPrice(id="extra-transfer", room_name="Traslado", price=300.0),
                ],
            ),
            Season(id="season-2", prices=[]),
        ],
    )


@pytest.fixture
def international_product():
    """Package product (passport required)."""
    return Product(id="prod-2", name="Paquete Japón", product_type="package")


# ============================================================================
# Draft
# ============================================================================


def _make_companion(
    index: int = 0,
    is_lead_passenger: bool = False,
    **overrides,
) -> Companion:
    """Fully filled roster row."""
    data = {
        "id": f"companion-{index}",
        "name": "Ana",
        "family_name": "López",
        "birthday": date(1990, 5, 1),
        "is_lead_passenger": is_lead_passenger,
    }
    data.update(overrides)
    return Companion(**data)


@pytest.fixture
def make_companion():
    """Factory for fully filled roster rows."""
    return _make_companion


@pytest.fixture
def complete_roster():
    """Two complete companions, first one is the lead passenger."""
    return [
        _make_companion(0, is_lead_passenger=True),
        _make_companion(1, name="Luis", family_name="Pérez", birthday=date(1985, 2, 10)),
    ]


@pytest.fixture
def review_store(complete_roster):
    """Draft ready for the reservation saga (date and travelers done)."""
    store = DraftStore("wiz-test")
    store.set_date_selection("season-1", "price-double", "Doble", "2026-06-01")
    store.set_companions(complete_roster)
    store.set_travelers(2, 1, 0)
    return store


@pytest.fixture
def notifier():
    return Notifier()


# ============================================================================
# Marketplace responses
# ============================================================================


def available_response(available: bool = True, message: str | None = None):
    return ActionResponse[AvailabilityResult](
        success=True, data=AvailabilityResult(available=available, message=message)
    )


def reservation_response(reservation_id: str = "R1", total_price: float = 1000.0):
    return ActionResponse[Reservation](
        success=True,
        data=Reservation(id=reservation_id, total_price=total_price, status="pending"),
    )


def payment_plan_response(plan_id: str = "P1"):
    return ActionResponse[PaymentPlan](
        success=True,
        data=PaymentPlan(
            id=plan_id,
            total_cost=1000.0,
            currency="MXN",
            cash_final_amount=950.0,
            cash_discount_percentage=5.0,
            installment_total_amount=1080.0,
            payment_type_selected="CONTADO",
        ),
    )


def checkout_response(url: str = CHECKOUT_URL):
    return ActionResponse[CheckoutSession](
        success=True, data=CheckoutSession(checkout_url=url, payment_id="pay_1")
    )


def failed_response(model, error: str):
    return ActionResponse[model](success=False, error=error)


class Responses:
    """Builders for marketplace envelopes."""

    available = staticmethod(available_response)
    reservation = staticmethod(reservation_response)
    payment_plan = staticmethod(payment_plan_response)
    checkout = staticmethod(checkout_response)
    failed = staticmethod(failed_response)


@pytest.fixture
def responses():
    return Responses


@pytest.fixture
def mock_client():
    """
    MarketplaceClient double where every call succeeds.

    Reservation R1 (total 1000), plan P1 (cash 950 MXN), checkout URL.
    """
    client = MagicMock()
    client.check_availability = AsyncMock(return_value=available_response())
    client.create_reservation = AsyncMock(return_value=reservation_response())
    client.generate_payment_plan = AsyncMock(return_value=payment_plan_response())
    client.initiate_payment = AsyncMock(return_value=checkout_response())
    return client
