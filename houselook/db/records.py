# File: houselook/db/records.py
# Shape normalization for listing records read from the store

from typing import Any, Dict, List, Mapping, Optional

from houselook.utils.images import decode_images
from houselook.utils.normalize import first_non_empty, parse_rent, to_number

PLACEHOLDER_IMAGE = "/placeholder.svg"


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def is_available(record: Mapping[str, Any]) -> bool:
    if record.get("available") is True:
        return True
    status = record.get("status")
    return isinstance(status, str) and status.lower() == "available"


def amenities_of(record: Mapping[str, Any]) -> List[str]:
    amenities = record.get("amenities")
    if isinstance(amenities, dict):
        amenities = list(amenities.values())
    if not isinstance(amenities, list):
        return []
    return [str(a) for a in amenities if a]


def agent_of(record: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    # Newer listings nest the agent; older ones keep names/phone at the top level
    agent = record.get("agent") if isinstance(record.get("agent"), Mapping) else {}
    name = first_non_empty(agent.get("names"), agent.get("name"), record.get("names"))
    phone = first_non_empty(agent.get("phone"), record.get("phone"))
    return {"name": name, "phone": phone, "whatsapp": phone}


def coordinates_of(record: Mapping[str, Any]) -> Dict[str, Optional[float]]:
    coords = record.get("coordinates") if isinstance(record.get("coordinates"), Mapping) else {}
    lat = first_non_empty(coords.get("lat"), record.get("lat"))
    lng = first_non_empty(coords.get("lng"), record.get("lng"))
    return {
        "lat": to_number(lat) if lat is not None else None,
        "lng": to_number(lng) if lng is not None else None,
    }


def to_list_item(property_id: str, record: Mapping[str, Any]) -> Dict[str, Any]:
    """Search result card for one listing."""
    images = decode_images(dict(record))
    furnished = first_non_empty(record.get("furnished"), record.get("furnishedStatus"))
    amenities = ([str(furnished)] if furnished else []) + amenities_of(record)
    return {
        "id": property_id,
        "name": _text(record.get("name") or record.get("title"), "Untitled Property"),
        "city": _text(record.get("town") or record.get("city"), "Unknown"),
        "rent": parse_rent(record.get("rent")),
        "bedroom": _text(record.get("bedroom") or record.get("unitType"), "Unknown"),
        "image": images[0] if images else PLACEHOLDER_IMAGE,
        "images": images,
        "amenities": amenities,
        "vacancies": _text(record.get("vacancies"), "0"),
        "available": is_available(record),
    }


def to_detail(property_id: str, record: Mapping[str, Any]) -> Dict[str, Any]:
    """House details page payload for one listing."""
    location = ", ".join(part for part in (_text(record.get("city")), _text(record.get("town"))) if part)
    features = []
    for label, field in (
        ("Bedrooms", "bedroom"),
        ("Balconies", "balcony"),
        ("Furnished", "furnished"),
        ("Vacancies", "vacancies"),
        ("Direction", "direction"),
    ):
        if record.get(field) not in (None, ""):
            features.append(f"{label}: {record.get(field)}")
    return {
        "id": property_id,
        "title": _text(record.get("name") or record.get("title"), "Untitled House"),
        "location": location,
        "price": int(parse_rent(record.get("rent"))),
        "type": _text(record.get("type") or record.get("propertyCategory")),
        "images": decode_images(dict(record)),
        "amenities": amenities_of(record),
        "available": is_available(record),
        "description": _text(record.get("description")),
        "features": features,
        "agent": agent_of(record),
        "coordinates": coordinates_of(record),
    }


def owner_of(record: Mapping[str, Any]) -> Optional[str]:
    return record.get("UserID") or record.get("createdBy")
