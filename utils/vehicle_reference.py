"""
Vehicle Reference Table

Static brand -> model -> segment table loaded from reference_data/vehicles.json.
Append-only reference data: it is read once at import and never mutated.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel

from enums.vehicle_segment import VehicleSegment


class CarModelDTO(BaseModel):
    name: str
    segment: VehicleSegment


class CarBrandDTO(BaseModel):
    brand: str
    models: list[CarModelDTO]


def load_car_brands(path: Path | None = None) -> list[CarBrandDTO]:
    if path is None:
        project_root = Path(__file__).parent.parent
        path = project_root / "reference_data" / "vehicles.json"

    with open(path, "r", encoding="utf-8") as f:
        brands = [CarBrandDTO.model_validate(brand) for brand in json.load(f)]

    logging.debug(f"Loaded vehicle reference table: {len(brands)} brands")
    return brands


CAR_BRANDS: list[CarBrandDTO] = load_car_brands()


def segment_for_model(model_name: str | None) -> VehicleSegment | None:
    """
    Look up the segment of a vehicle model.

    Brands are scanned in table order and the first brand listing the model wins.
    Matching is exact on the model name.

    Returns:
        VehicleSegment, or None if the model is unknown
    """
    if not model_name:
        return None
    for brand in CAR_BRANDS:
        for model in brand.models:
            if model.name == model_name:
                return model.segment
    return None


def models_for_brand(brand_name: str) -> list[CarModelDTO]:
    """Models of a brand (case-insensitive), empty list if the brand is unknown."""
    for brand in CAR_BRANDS:
        if brand.brand.lower() == brand_name.strip().lower():
            return list(brand.models)
    return []
