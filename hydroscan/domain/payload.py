# hydroscan/domain/payload.py
"""
Codec for the strings printed into customer QR labels.

Format: ``name=<name>;address=<address>;unit=<uom>;type=<water type>``.
Malformed segments and unknown keys are skipped rather than rejected.
"""
from dataclasses import dataclass

from hydroscan.domain.enums import WaterType
from hydroscan.domain.errors import ValidationError
from hydroscan.domain.products import Uom

KNOWN_KEYS = ("name", "address", "unit", "type")


def parse_payload(raw: str) -> dict[str, str]:
    data = {}
    for part in (raw or "").split(";"):
        key, sep, value = part.partition("=")
        key, value = key.strip(), value.strip()
        if not sep or not key or not value:
            continue
        data[key] = value
    return data


def build_payload(name: str, address: str, unit: str, water_type=None) -> str:
    fields = {"name": name, "address": address, "unit": unit}
    if water_type is not None:
        fields["type"] = str(WaterType.parse(water_type))
    for key, value in fields.items():
        if ";" in value or "=" in value:
            raise ValidationError(f"'{key}' must not contain ';' or '='")
    return ";".join(f"{k}={v}" for k, v in fields.items())


@dataclass(frozen=True)
class ScannedPayload:
    name: str | None = None
    address: str | None = None
    unit: Uom | None = None
    water_type: WaterType | None = None

    @classmethod
    def from_raw(cls, raw: str) -> "ScannedPayload":
        data = parse_payload(raw)

        unit = None
        if "unit" in data:
            try:
                unit = Uom.parse(data["unit"])
            except ValidationError:
                unit = None

        water_type = None
        if "type" in data:
            try:
                water_type = WaterType.from_code(data["type"])
            except ValidationError:
                water_type = None
            if water_type in (WaterType.ACCESSORY, WaterType.NO_REFILL):
                water_type = None

        return cls(
            name=data.get("name"),
            address=data.get("address"),
            unit=unit,
            water_type=water_type,
        )
