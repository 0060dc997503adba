# File: houselook/services/property_service.py
# Listing search, details and admin listing management over the property collection

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from houselook.db import collections
from houselook.db.records import owner_of, to_detail, to_list_item
from houselook.db.store import RecordStore, StoreUnavailable, read_collection
from houselook.schemas.property import PropertyCreate, PropertySearch, PropertyUpdate
from houselook.utils.normalize import parse_rent, to_number

logger = logging.getLogger(__name__)


def _optional_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    number = to_number(value, default=None)
    return number if number else None


class PropertyService:
    def search(self, store: RecordStore, filters: PropertySearch) -> List[Dict[str, Any]]:
        """
        Search listings

        Args:
            store: Record store
            filters: location substring, inclusive rent range, room type substring, required amenities

        Returns:
            Matching listing cards; an empty list when the store is unreachable
        """
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error searching properties: {e}")
            return []

        houses = [to_list_item(pid, record) for pid, record in properties.items()]

        if filters.location:
            needle = filters.location.lower()
            houses = [h for h in houses if needle in h["city"].lower()]
        if filters.min_price is not None or filters.max_price is not None:
            low = filters.min_price or 0
            high = filters.max_price
            houses = [h for h in houses if h["rent"] >= low and (high is None or h["rent"] <= high)]
        if filters.room_type:
            needle = filters.room_type.lower()
            houses = [h for h in houses if needle in h["bedroom"].lower()]
        if filters.amenities:
            wanted = {a.lower() for a in filters.amenities}
            houses = [h for h in houses if wanted <= {a.lower() for a in h["amenities"]}]

        logger.info(f"Property search matched {len(houses)} of {len(properties)} listings")
        return houses

    def get_detail(self, store: RecordStore, property_id: str) -> Optional[Dict[str, Any]]:
        record = store.get(collections.property_path(property_id))
        if not isinstance(record, dict):
            return None
        return to_detail(property_id, record)

    def create_listing(self, store: RecordStore, data: PropertyCreate, created_by: str) -> str:
        """
        Create a listing from the admin form

        Returns:
            The new listing id
        """
        payload = {
            "name": data.property_name,
            "propertyCategory": data.property_category,
            "unitType": data.unit_type,
            "rent": parse_rent(data.rent_amount),
            "deposit": parse_rent(data.deposit_amount),
            "furnishedStatus": data.furnished_status,
            "amenities": data.amenities,
            "location": data.address,
            "county": data.county,
            "subCounty": data.sub_county,
            "city": data.city,
            "town": data.town,
            "coordinates": {
                "lat": _optional_number(data.latitude),
                "lng": _optional_number(data.longitude),
            },
            "description": data.description,
            "direction": data.directions,
            "agent": {
                "names": data.agent_name,
                "phone": data.agent_phone,
            },
            "available": True,
            "createdAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "createdBy": created_by or "admin",
        }
        if data.images:
            payload["images"] = data.images

        property_id = store.push(collections.PROPERTIES, payload)
        store.update(collections.property_path(property_id), {"id": property_id})
        logger.info(f"Property created successfully with ID: {property_id}")
        return property_id

    def update_listing(self, store: RecordStore, property_id: str, data: PropertyUpdate) -> Optional[Dict[str, Any]]:
        """Apply an admin edit. Listings are never deleted here. Returns None if the listing does not exist."""
        path = collections.property_path(property_id)
        if not isinstance(store.get(path), dict):
            return None
        changes = data.model_dump(exclude_unset=True)
        if "rent" in changes and changes["rent"] is not None:
            changes["rent"] = parse_rent(changes["rent"])
        # None would delete the field
        changes = {k: v for k, v in changes.items() if v is not None}
        if changes:
            store.update(path, changes)
            logger.info(f"Property {property_id} updated: {sorted(changes)}")
        return self.get_detail(store, property_id)

    def get_user_properties(self, store: RecordStore, user_id: str) -> List[Dict[str, Any]]:
        properties = read_collection(store, collections.PROPERTIES)
        return [
            to_list_item(pid, record)
            for pid, record in properties.items()
            if owner_of(record) == user_id
        ]


# Create singleton instance
property_service = PropertyService()
