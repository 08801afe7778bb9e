"""
Read-only product catalog models and lookups.

Seasons, room price options and extra services are supplied by the product
catalog. The booking flow only reads identifiers from them; prices shown here
are informational and never sent back to the backend.
"""

from pydantic import BaseModel, ConfigDict, Field


class ChildPrice(BaseModel):
    """Child price range of a room price option."""

    name: str
    min_minor_age: int
    max_minor_age: int
    child_price: float

    model_config = ConfigDict(frozen=True)


class PriceOption(BaseModel):
    """Purchasable room configuration within a season."""

    id: str
    room_name: str
    price: float
    currency: str = "MXN"
    max_adult: int = 0
    max_minor: int = 0
    children: list[ChildPrice] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ExtraPrice(BaseModel):
    """Optional add-on priced independently of the room."""

    id: str
    room_name: str
    price: float
    currency: str = "MXN"

    model_config = ConfigDict(frozen=True)


class Season(BaseModel):
    """Date range with capacity and room prices for a product."""

    id: str
    start_date: str | None = None
    end_date: str | None = None
    number_of_nights: str | None = None
    category: str | None = None
    allotment: int | None = None
    allotment_remain: int | None = None
    prices: list[PriceOption] = Field(default_factory=list)
    extra_prices: list[ExtraPrice] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Product(BaseModel):
    """Marketplace product as consumed by the booking wizard."""

    id: str
    name: str
    product_type: str | None = None  # "circuit" | "package"
    seasons: list[Season] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def is_international(self) -> bool:
        """Packages are treated as international trips (passport required)."""
        return self.product_type == "package"


def find_season(product: Product, season_id: str | None) -> Season | None:
    if not season_id:
        return None
    return next((s for s in product.seasons if s.id == season_id), None)


def find_price_option(
    product: Product, season_id: str | None, price_option_id: str | None
) -> PriceOption | None:
    """
    Resolve a room price option by its id inside the chosen season.

    The id, not the room display name, identifies the option: two rooms may
    share a name.
    """
    season = find_season(product, season_id)
    if season is None or not price_option_id:
        return None
    return next((p for p in season.prices if p.id == price_option_id), None)


def find_extra_price(
    product: Product, season_id: str | None, extra_id: str
) -> ExtraPrice | None:
    season = find_season(product, season_id)
    if season is None:
        return None
    return next((e for e in season.extra_prices if e.id == extra_id), None)


def extras_total(product: Product, season_id: str | None, extra_ids: tuple[str, ...]) -> float:
    """Informational sum of the selected extra services."""
    total = 0.0
    for extra_id in extra_ids:
        extra = find_extra_price(product, season_id, extra_id)
        if extra is not None:
            total += extra.price
    return total
