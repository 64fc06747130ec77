"""Boundary normalization of business records.

Business records arrive from the web frontend and from legacy exports
under several field names (``bname`` vs ``business_name``, ``zip`` vs
``postal_code``, GeoJSON ``location`` vs flat ``lat``/``lng``). They are
mapped onto the canonical :class:`Business` schema here, once, through an
explicit alias table. Nothing downstream looks up alternate names.
"""

from typing import Any, Optional
from uuid import UUID

from .business import Address, Business

BUSINESS_FIELD_ALIASES: dict[str, str] = {
    "_id": "id",
    "id": "id",
    "business_id": "id",
    "bname": "name",
    "business_name": "name",
    "name": "name",
    "address1": "address1",
    "street_address": "address1",
    "street": "address1",
    "address2": "address2",
    "city": "city",
    "state": "state",
    "zip": "zip_code",
    "zip_code": "zip_code",
    "postal_code": "zip_code",
    "lat": "latitude",
    "latitude": "latitude",
    "lng": "longitude",
    "lon": "longitude",
    "longitude": "longitude",
    "type": "business_type",
    "business_type": "business_type",
    "phone": "phone",
    "google_place_id": "google_place_id",
    "placeId": "google_place_id",
    "chain_id": "chain_id",
    "chain_name": "chain_name",
    "is_chain": "is_chain",
    "status": "status",
}

_ADDRESS_FIELDS = frozenset(Address.model_fields)


def _coordinates_from_geojson(location: Any) -> tuple[Optional[float], Optional[float]]:
    # GeoJSON points store [longitude, latitude]
    if isinstance(location, dict):
        coordinates = location.get("coordinates")
        if isinstance(coordinates, (list, tuple)) and len(coordinates) == 2:
            try:
                return float(coordinates[1]), float(coordinates[0])
            except (TypeError, ValueError):
                return None, None
    return None, None


def normalize_business_record(record: dict[str, Any]) -> Business:
    """Build a canonical Business from a record using any known alias.

    Raises:
        ValueError: If the normalized record is invalid (pydantic's
            ValidationError is a ValueError)
    """
    canonical: dict[str, Any] = {}
    address: dict[str, Any] = {}

    for key, value in record.items():
        target = BUSINESS_FIELD_ALIASES.get(key)
        if target is None or value is None:
            continue
        if target in _ADDRESS_FIELDS:
            address.setdefault(target, value)
        else:
            canonical.setdefault(target, value)

    if "latitude" not in address and "location" in record:
        lat, lng = _coordinates_from_geojson(record["location"])
        if lat is not None:
            address["latitude"] = lat
            address["longitude"] = lng

    if "id" in canonical and not isinstance(canonical["id"], UUID):
        try:
            canonical["id"] = UUID(str(canonical["id"]))
        except ValueError:
            # Legacy document ids are not UUIDs; the record gets a fresh one
            del canonical["id"]

    return Business(address=Address(**address), **canonical)
