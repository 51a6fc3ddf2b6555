"""Inventory filtering and ordering for list views."""

from collections.abc import Iterable

from src.core.entities import Battery, Brand

ALL_BRANDS = "all"


def _brand_matches(battery: Battery, brand: Brand | str | None) -> bool:
    if brand is None:
        return True
    if isinstance(brand, Brand):
        return battery.brand is brand
    if brand.lower() == ALL_BRANDS:
        return True
    return battery.brand.value == brand


def filter_inventory(
    batteries: Iterable[Battery],
    brand: Brand | str | None = ALL_BRANDS,
    query: str = "",
) -> list[Battery]:
    """
    Filter batteries by brand and free text, ordered by brand then amperage.

    Args:
        batteries: Inventory rows
        brand: Exact brand, or "all"/None for every brand
        query: Case-insensitive substring of the brand name or the amperage digits

    Returns:
        Matching batteries sorted by brand name, then amperage ascending
    """
    needle = query.strip().lower()
    matches = [
        b
        for b in batteries
        if _brand_matches(b, brand)
        and (needle in b.brand.value.lower() or needle in str(b.amperage))
    ]
    return sorted(matches, key=lambda b: (b.brand.value, b.amperage))
