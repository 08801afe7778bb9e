"""
External service adapters for the booking flow.

- MarketplaceClient: availability, reservation, payment plan and checkout calls
"""

from booking.services.marketplace_client import MarketplaceClient

__all__ = ["MarketplaceClient"]
