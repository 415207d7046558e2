# hydroscan/domain/products.py
import re
from dataclasses import dataclass

from hydroscan.domain.enums import GallonShape, ProductCategory, WaterType
from hydroscan.domain.errors import ValidationError

_LITERS_RE = re.compile(r"(\d+)\s*L\b", re.IGNORECASE)
PIECE_LABEL = "1 Piece"


@dataclass(frozen=True)
class Uom:
    """
    Unit of measure of a line item.

    liters is None for accessories ("1 Piece"); shape qualifies gallons
    ("20L Slim", "20L Round").
    """

    liters: int | None = None
    shape: GallonShape | None = None

    @classmethod
    def parse(cls, raw) -> "Uom":
        if isinstance(raw, Uom):
            return raw
        text = (raw or "").strip()
        if not text:
            raise ValidationError("Unit of measure is required")

        match = _LITERS_RE.search(text)
        liters = int(match.group(1)) if match else None

        shape = None
        lowered = text.lower()
        if "slim" in lowered:
            shape = GallonShape.SLIM
        elif "round" in lowered:
            shape = GallonShape.ROUND

        if liters is None and shape is None and "piece" not in lowered:
            raise ValidationError(f"Unrecognized unit of measure: {raw!r}")
        return cls(liters=liters, shape=shape)

    @classmethod
    def piece(cls) -> "Uom":
        return cls()

    @property
    def numeric_value(self) -> int:
        return self.liters or 0

    @property
    def label(self) -> str:
        if self.liters is None and self.shape is None:
            return PIECE_LABEL
        parts = []
        if self.liters is not None:
            parts.append(f"{self.liters}L")
        if self.shape is not None:
            parts.append(self.shape.value)
        return " ".join(parts)

    def __str__(self):
        return self.label


@dataclass(frozen=True)
class ProductVariant:
    """Structured product identifier fixed when an item enters the cart."""

    category: ProductCategory
    water_type: WaterType
    uom: Uom

    def __post_init__(self):
        if self.category.is_accessory and self.water_type is not WaterType.ACCESSORY:
            raise ValidationError(f"{self.category} is an accessory and has no water type")
        if not self.category.is_accessory and self.water_type is WaterType.ACCESSORY:
            raise ValidationError(f"{self.category} needs a water type")
        if self.category is ProductCategory.REFILL and self.water_type is WaterType.NO_REFILL:
            raise ValidationError("A refill cannot be 'No Refill'")

    @classmethod
    def refill(cls, water_type, uom) -> "ProductVariant":
        return cls(ProductCategory.REFILL, WaterType.parse(water_type), Uom.parse(uom))

    @classmethod
    def new_gallon(cls, water_type, shape=GallonShape.SLIM) -> "ProductVariant":
        shape = GallonShape.parse(shape)
        return cls(ProductCategory.NEW_GALLON, WaterType.parse(water_type), Uom(liters=20, shape=shape))

    @classmethod
    def accessory(cls, category) -> "ProductVariant":
        category = ProductCategory.parse(category)
        if not category.is_accessory:
            raise ValidationError(f"{category} is not an accessory")
        return cls(category, WaterType.ACCESSORY, Uom.piece())

    @property
    def is_gallon(self) -> bool:
        return not self.category.is_accessory


SELF_RECIPIENT = "Self"


@dataclass(frozen=True)
class CartItemInput:
    variant: ProductVariant
    quantity: int
    recipient_name: str = SELF_RECIPIENT
    recipient_address: str = SELF_RECIPIENT
