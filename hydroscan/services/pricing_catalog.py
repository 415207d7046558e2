# hydroscan/services/pricing_catalog.py
from dataclasses import dataclass

from hydroscan.domain.enums import GallonShape, ProductCategory, WaterType
from hydroscan.domain.products import ProductVariant, Uom
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    centavos: int
    priced: bool = True


#refills priced per (water type, liters); gallon shape does not matter
REFILL_PRICES = {
    (WaterType.ALKALINE, 20): 5000,
    (WaterType.MINERAL, 20): 3000,
    (WaterType.ALKALINE, 10): 2500,
    (WaterType.MINERAL, 10): 1500,
}

#flat prices, independent of water type and UOM
FLAT_PRICES = {
    ProductCategory.NEW_GALLON: 20000,
    ProductCategory.BIG_CAP_COVER: 2500,
    ProductCategory.SMALL_CAP_COVER: 1000,
    ProductCategory.ROUND_CAP_COVER: 500,
    ProductCategory.NON_LEAK_COVER: 300,
}

UNPRICED = PriceQuote(0, priced=False)


class PricingCatalog:
    """Single source of truth for unit prices, in centavos."""

    def __init__(self, refill_prices: dict | None = None, flat_prices: dict | None = None):
        self.refill_prices = dict(REFILL_PRICES if refill_prices is None else refill_prices)
        self.flat_prices = dict(FLAT_PRICES if flat_prices is None else flat_prices)

    def price(self, category, water_type, uom) -> PriceQuote:
        category = ProductCategory.parse(category)
        water_type = WaterType.parse(water_type)
        uom = Uom.parse(uom)

        if category in self.flat_prices:
            return PriceQuote(self.flat_prices[category])

        if category is ProductCategory.REFILL:
            centavos = self.refill_prices.get((water_type, uom.liters))
            if centavos is not None:
                return PriceQuote(centavos)

        logger.warning(f"Unpriced item: {category} / {water_type} / {uom}")
        return UNPRICED

    def price_variant(self, variant: ProductVariant) -> PriceQuote:
        return self.price(variant.category, variant.water_type, variant.uom)

    @staticmethod
    def product_name(variant: ProductVariant) -> str:
        if variant.category is ProductCategory.REFILL:
            name = f"Refill {variant.water_type} {variant.uom.liters}L"
            if variant.uom.shape is not None:
                name += f" ({variant.uom.shape})"
            return name
        if variant.category is ProductCategory.NEW_GALLON:
            shape = variant.uom.shape or GallonShape.SLIM
            return f"New {shape} Gallon"
        return variant.category.value

    @staticmethod
    def export_label(variant: ProductVariant) -> str:
        """Product label used in exported sales reports."""
        if variant.category is ProductCategory.REFILL:
            return variant.water_type.value
        if variant.category is ProductCategory.NEW_GALLON:
            shape = variant.uom.shape or GallonShape.SLIM
            return f"{shape} Gallon (New)"
        return variant.category.value
