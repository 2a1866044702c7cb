"""Utilities for transforming directory rows and Google Places payloads into domain models."""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from patriot_search.matching.classifier import marker_color
from patriot_search.models import BusinessRecord, DuplicateCheckResult, ExternalPlace, ReconciledResult

logger = logging.getLogger(__name__)


class MalformedExternalPlace(ValueError):
    """Raised when a Places payload lacks the fields needed for a duplicate check."""


_STATE_CODES = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT", "delaware": "DE",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID",
    "illinois": "IL", "indiana": "IN", "iowa": "IA", "kansas": "KS",
    "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT",
    "vermont": "VT", "virginia": "VA", "washington": "WA", "west virginia": "WV",
    "wisconsin": "WI", "wyoming": "WY", "district of columbia": "DC",
    "puerto rico": "PR", "guam": "GU", "u.s. virgin islands": "VI",
    "american samoa": "AS", "northern mariana islands": "MP",
}
STATE_CODES = frozenset(_STATE_CODES.values())

# Google place types -> directory category codes, first hit wins.
_CATEGORY_BY_TYPE = {
    "restaurant": "REST", "food": "REST", "cafe": "REST", "bakery": "REST", "bar": "REST",
    "meal_delivery": "REST", "meal_takeaway": "REST",
    "car_dealer": "AUTO", "car_rental": "AUTO", "car_repair": "AUTO", "car_wash": "AUTO",
    "grocery_or_supermarket": "GROC", "supermarket": "GROC",
    "gas_station": "FUEL", "convenience_store": "CONV",
    "lodging": "HOTEL", "hotel": "HOTEL", "motel": "HOTEL",
    "pharmacy": "RX", "drugstore": "RX",
    "hospital": "HEAL", "doctor": "HEAL", "dentist": "HEAL", "health": "HEAL", "gym": "HEAL",
    "beauty_salon": "BEAU", "hair_care": "BEAU", "spa": "BEAU",
    "department_store": "DEPT", "shopping_mall": "DEPT",
    "clothing_store": "CLTH", "shoe_store": "CLTH", "jewelry_store": "JEWL",
    "electronics_store": "ELEC", "furniture_store": "FURN", "home_goods_store": "FURN",
    "hardware_store": "HARDW", "pet_store": "RETAIL", "florist": "GIFT", "book_store": "BOOK",
    "movie_theater": "ENTR", "amusement_park": "ENTR", "bowling_alley": "ENTR",
    "casino": "ENTR", "night_club": "ENTR", "stadium": "ENTR",
    "sporting_goods_store": "SPRT",
    "bank": "SERV", "atm": "SERV", "insurance_agency": "SERV", "real_estate_agency": "SERV",
    "travel_agency": "SERV", "laundry": "SERV", "locksmith": "SERV", "electrician": "SERV",
    "plumber": "SERV",
    "store": "RETAIL",
}

_ZIP = re.compile(r"(\d{5}(?:-\d{4})?)")
_STATE_ZIP = re.compile(r"^\s*([A-Z]{2})\s+(\d{5}(?:-\d{4})?)", re.IGNORECASE)
_STATE_ONLY = re.compile(r"^\s*([A-Z]{2})\s*$", re.IGNORECASE)
_FULL_STATE_ZIP = re.compile(r"^\s*([A-Za-z .]+?)\s+(\d{5}(?:-\d{4})?)")
_ANY_STATE_ZIP = re.compile(r",\s*([A-Z]{2})\s+(\d{5}(?:-\d{4})?)", re.IGNORECASE)


def state_abbreviation(state_name: str) -> str:
    normalized = (state_name or "").strip().lower()
    return _STATE_CODES.get(normalized) or state_name.strip().upper()[:2]


def _component_text(component: Dict[str, Any], short: bool = False) -> str:
    # Legacy Places API uses long_name/short_name, Places API (New) uses longText/shortText.
    if short:
        return component.get("short_name") or component.get("shortText") or ""
    return component.get("long_name") or component.get("longText") or ""


def _find_component(components: Iterable[Dict[str, Any]], *wanted: str) -> Optional[Dict[str, Any]]:
    for component in components or []:
        types = set(component.get("types", []))
        if types.intersection(wanted):
            return component
    return None


def parse_address_components(address_components: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    components = list(address_components or [])
    street_number = _find_component(components, "street_number")
    route = _find_component(components, "route")
    city = _find_component(components, "locality", "sublocality")
    state = _find_component(components, "administrative_area_level_1")
    postal = _find_component(components, "postal_code")

    street = " ".join(
        part for part in (
            _component_text(street_number) if street_number else "",
            _component_text(route) if route else "",
        ) if part
    )
    return {
        "street": street,
        "city": _component_text(city) if city else "",
        "state": _component_text(state, short=True) if state else "",
        "zip": _component_text(postal) if postal else "",
    }


def parse_formatted_address(formatted_address: Optional[str]) -> Dict[str, str]:
    """Split "Street, City, ST 12345, USA" style addresses into their parts.

    Handles a two-letter state with or without a zip in the third segment and
    full state names ("Iowa 52203"), then falls back to locating a
    ", ST 12345" group anywhere in the string.
    """
    if not formatted_address:
        return {"street": "", "city": "", "state": "", "zip": ""}

    parts = [part.strip() for part in formatted_address.split(",")]
    if len(parts) >= 3:
        street, city, state_zip = parts[0], parts[1], parts[2]

        match = _STATE_ZIP.match(state_zip)
        if match:
            return {"street": street, "city": city, "state": match.group(1).upper(), "zip": match.group(2)}

        match = _STATE_ONLY.match(state_zip)
        if match:
            zip_code = ""
            for rest in parts[3:]:
                zip_match = _ZIP.search(rest)
                if zip_match:
                    zip_code = zip_match.group(1)
                    break
            return {"street": street, "city": city, "state": match.group(1).upper(), "zip": zip_code}

        match = _FULL_STATE_ZIP.match(state_zip)
        if match:
            return {"street": street, "city": city, "state": state_abbreviation(match.group(1)), "zip": match.group(2)}

    match = _ANY_STATE_ZIP.search(formatted_address)
    if match:
        before = [part.strip() for part in formatted_address[: match.start()].split(",")]
        return {
            "street": before[0] if before else "",
            "city": before[-1] if len(before) > 1 else "",
            "state": match.group(1).upper(),
            "zip": match.group(2),
        }

    logger.debug("Could not parse formatted address %r, using positional fallback", formatted_address)
    return {
        "street": parts[0] if parts else "",
        "city": parts[1] if len(parts) > 1 else "",
        "state": "",
        "zip": "",
    }


def map_place_category(types: Iterable[str]) -> str:
    for type_name in types or []:
        category = _CATEGORY_BY_TYPE.get(str(type_name).lower())
        if category:
            return category
    return ""


def _place_location(details: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    location = (details.get("geometry") or {}).get("location") or details.get("location") or {}
    lat = location.get("lat", location.get("latitude"))
    lng = location.get("lng", location.get("longitude"))
    if lat is None or lng is None:
        return None
    try:
        return float(lat), float(lng)
    except (TypeError, ValueError):
        return None


def _display_name(details: Dict[str, Any]) -> Optional[str]:
    name = details.get("displayName", details.get("name"))
    if isinstance(name, dict):
        name = name.get("text")
    name = (name or "").strip()
    return name or None


def to_external_place(details: Dict[str, Any]) -> ExternalPlace:
    """Convert a Places details/text-search payload into an ExternalPlace."""
    formatted_address = details.get("formatted_address") or details.get("formattedAddress") or details.get("vicinity") or ""
    components = details.get("address_components") or details.get("addressComponents") or []
    address = parse_address_components(components) if components else parse_formatted_address(formatted_address)
    if components and not address["street"]:
        address["street"] = parse_formatted_address(formatted_address)["street"]

    phone = (
        details.get("formatted_phone_number")
        or details.get("nationalPhoneNumber")
        or details.get("international_phone_number")
        or details.get("internationalPhoneNumber")
    )
    types = tuple(details.get("types") or ())

    return ExternalPlace(
        external_id=details.get("place_id") or details.get("id") or None,
        display_name=_display_name(details),
        formatted_address=formatted_address,
        phone_number=phone or None,
        website_url=details.get("website") or details.get("websiteUri") or None,
        location=_place_location(details),
        street_address=address["street"],
        city=address["city"],
        state_code=address["state"],
        postal_code=address["zip"],
        types=types,
        category=map_place_category(types),
    )


def validate_place(place: ExternalPlace) -> ExternalPlace:
    missing = [name for name, value in (("display_name", place.display_name), ("location", place.location)) if not value]
    if missing:
        raise MalformedExternalPlace(f"place {place.external_id or '<no id>'} is missing {', '.join(missing)}")
    return place


def _coordinates(row: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    location = row.get("location") or {}
    coords = location.get("coordinates") if isinstance(location, dict) else None
    if coords and len(coords) == 2:
        # GeoJSON order is [lng, lat]
        try:
            return float(coords[1]), float(coords[0])
        except (TypeError, ValueError):
            return None
    legacy = row.get("coordinates") or {}
    if isinstance(legacy, dict) and legacy.get("lat") is not None and legacy.get("lng") is not None:
        try:
            return float(legacy["lat"]), float(legacy["lng"])
        except (TypeError, ValueError):
            return None
    return None


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def to_business_record(row: Dict[str, Any]) -> BusinessRecord:
    """Build a BusinessRecord from a directory search row."""
    record_id = row.get("_id") or row.get("id")
    if isinstance(record_id, dict):
        record_id = record_id.get("$oid")
    if not record_id:
        raise ValueError("directory row is missing its id")

    incentives = row.get("incentives") or []
    return BusinessRecord(
        id=str(record_id),
        name=str(row.get("bname") or row.get("name") or ""),
        address1=str(row.get("address1") or ""),
        address2=_str_or_none(row.get("address2")),
        city=str(row.get("city") or ""),
        state=str(row.get("state") or ""),
        zip_code=str(row.get("zip") or row.get("zipCode") or ""),
        phone=_str_or_none(row.get("phone")),
        chain_id=_str_or_none(row.get("chain_id")),
        chain_name=_str_or_none(row.get("chain_name")),
        external_place_id=_str_or_none(row.get("google_place_id") or row.get("placeId")),
        coordinates=_coordinates(row),
        category=_str_or_none(row.get("type")),
        website=_str_or_none(row.get("website")),
        incentives=list(incentives) if isinstance(incentives, list) else [],
        raw=row,
    )


def to_business_records(rows: Iterable[Dict[str, Any]]) -> List[BusinessRecord]:
    records: List[BusinessRecord] = []
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        try:
            records.append(to_business_record(row))
        except ValueError as exc:
            logger.debug("Skipping directory row: %s", exc)
    return records


def external_to_business_record(place: ExternalPlace) -> BusinessRecord:
    """Synthesize a display-only record for a place the directory does not list."""
    return BusinessRecord(
        id=f"google_{place.external_id}",
        name=place.display_name or "",
        address1=place.street_address,
        city=place.city,
        state=place.state_code,
        zip_code=place.postal_code,
        phone=place.phone_number,
        external_place_id=place.external_id,
        coordinates=place.location,
        category=place.category or None,
        website=place.website_url,
        is_external=True,
    )


def to_prefill(place: ExternalPlace) -> Dict[str, Any]:
    """Fields used to prefill the add-business form from a place."""
    lat, lng = place.location if place.location else (None, None)
    return {
        "bname": place.display_name or "",
        "address1": place.street_address,
        "address2": "",
        "city": place.city,
        "state": place.state_code,
        "zip": place.postal_code,
        "phone": place.phone_number or "",
        "website": place.website_url or "",
        "google_place_id": place.external_id or "",
        "type": place.category,
        "lat": lat,
        "lng": lng,
    }


def record_to_row(record: BusinessRecord) -> Dict[str, Any]:
    lat, lng = record.coordinates if record.coordinates else (None, None)
    return {
        "id": record.id,
        "bname": record.name,
        "address1": record.address1,
        "address2": record.address2,
        "city": record.city,
        "state": record.state,
        "zip": record.zip_code,
        "phone": record.phone,
        "chain_id": record.chain_id,
        "chain_name": record.chain_name,
        "google_place_id": record.external_place_id,
        "type": record.category,
        "website": record.website,
        "lat": lat,
        "lng": lng,
        "incentives": record.incentives,
        "is_external": record.is_external,
    }


def place_to_row(place: ExternalPlace) -> Dict[str, Any]:
    lat, lng = place.location if place.location else (None, None)
    return {
        "google_place_id": place.external_id,
        "bname": place.display_name,
        "formatted_address": place.formatted_address,
        "phone": place.phone_number,
        "website": place.website_url,
        "city": place.city,
        "state": place.state_code,
        "zip": place.postal_code,
        "lat": lat,
        "lng": lng,
    }


def result_to_row(result: ReconciledResult) -> Dict[str, Any]:
    if isinstance(result.record, BusinessRecord):
        row = record_to_row(result.record)
    else:
        row = place_to_row(result.record)
    row["provenance"] = result.provenance.value
    row["marker_color"] = marker_color(result.provenance)
    row["duplicate_of_internal_id"] = result.duplicate_of_internal_id
    return row


def duplicate_check_to_row(result: DuplicateCheckResult) -> Dict[str, Any]:
    return {
        "outcome": result.outcome.value,
        "reason": result.reason.value,
        "match": result_to_row(result.match) if result.match else None,
        "prefill": result.prefill,
        "place": place_to_row(result.place) if result.place else None,
    }
