"""External place search models (never persisted)."""

from typing import Optional

from pydantic import BaseModel, Field


class PlaceCandidate(BaseModel):
    """A place search result offered as a possible match for a business."""

    place_id: str
    name: str = ""
    formatted_address: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    types: list[str] = Field(default_factory=list)
    score: int = 0
    is_best_match: bool = False


class GeocodeLocation(BaseModel):
    """Geocoder hit for a single address."""

    latitude: float
    longitude: float
    formatted_address: str = ""
    place_id: Optional[str] = None


class GeocodeItem(BaseModel):
    """Per-address outcome inside a batch geocode."""

    index: int
    original_address: str
    success: bool
    location: Optional[GeocodeLocation] = None
    error: Optional[str] = None
