# hydroscan/domain/enums.py
from enum import Enum

from hydroscan.domain.errors import ValidationError


class _LabelEnum(str, Enum):
    """String enum parsed from the raw labels the outer layers hand in."""

    @classmethod
    def parse(cls, raw):
        if isinstance(raw, cls):
            return raw
        text = (raw or "").strip().lower()
        for member in cls:
            if text in (member.value.lower(), member.name.lower()):
                return member
        raise ValidationError(f"Unknown {cls.__name__}: {raw!r}")

    def __str__(self):
        return self.value


class WaterType(_LabelEnum):
    MINERAL = "Mineral"
    ALKALINE = "Alkaline"
    ACCESSORY = "Accessory"
    NO_REFILL = "No Refill"

    @property
    def code(self) -> str:
        return {"Mineral": "M", "Alkaline": "A"}.get(self.value, "")

    @classmethod
    def from_code(cls, raw):
        """Accepts both full names and the single-letter codes printed on scanned labels."""
        text = (raw or "").strip().upper()
        if text == "M":
            return cls.MINERAL
        if text == "A":
            return cls.ALKALINE
        return cls.parse(raw)


class OrderStatus(_LabelEnum):
    PROCESSING = "Processing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @property
    def label(self) -> str:
        # admin screens show processing orders as "Pending"
        return "Pending" if self is OrderStatus.PROCESSING else self.value


class ProductCategory(_LabelEnum):
    REFILL = "Refill"
    NEW_GALLON = "New Gallon"
    BIG_CAP_COVER = "Big Cap Cover"
    SMALL_CAP_COVER = "Small Cap Cover"
    ROUND_CAP_COVER = "Round Cap Cover"
    NON_LEAK_COVER = "Non-leak Cover"

    @property
    def is_accessory(self) -> bool:
        return self not in (ProductCategory.REFILL, ProductCategory.NEW_GALLON)


class GallonShape(_LabelEnum):
    SLIM = "Slim"
    ROUND = "Round"


class ReportPeriod(_LabelEnum):
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"
