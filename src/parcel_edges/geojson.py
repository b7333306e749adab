"""
GeoJSON input and output

Pydantic models for the parcel feature schema, sanitisation of raw parcel
records, and edge overlays for rendering
"""

import json
import math
from pathlib import Path
from typing import List, Dict, Any, Optional, Union, Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, FiniteFloat, ValidationError, field_validator

from .models import EdgeType, Parcel, ParcelAnalysis, Position

EDGE_COLORS = {
    EdgeType.FRONTAGE: "#d62828",
    EdgeType.FLANKAGE: "#f77f00",
    EdgeType.REAR_LANE: "#2a9d8f",
    EdgeType.REAR: "#264653",
    EdgeType.SIDE: "#6c757d",
}


# ============================================================
# Parcel input schema
# ============================================================

class ParcelProperties(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    fullAddress: str
    streetName: str = ""
    siteId: str = ""
    taxCoord: str = ""
    civicNumber: str = ""
    lon: FiniteFloat
    lat: FiniteFloat

    @field_validator("id", "fullAddress", "streetName", "siteId", "taxCoord", "civicNumber", mode="before")
    @classmethod
    def coerce_string(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("id", "fullAddress")
    @classmethod
    def require_value(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value


class PolygonGeometry(BaseModel):
    type: Literal["Polygon"]
    coordinates: List[List[List[float]]]

    @field_validator("coordinates")
    @classmethod
    def check_outer_ring(cls, rings: List[List[List[float]]]) -> List[List[List[float]]]:
        if not rings:
            raise ValueError("polygon has no rings")
        ring = rings[0]
        for position in ring:
            if len(position) < 2 or not all(math.isfinite(v) for v in position[:2]):
                raise ValueError("ring contains an invalid position")
        distinct = {(p[0], p[1]) for p in ring}
        if len(distinct) < 2:
            raise ValueError("ring needs at least two distinct points")
        return rings


class ParcelFeature(BaseModel):
    type: Literal["Feature"]
    geometry: PolygonGeometry
    properties: ParcelProperties

    def to_parcel(self) -> Parcel:
        ring: List[Position] = [(p[0], p[1]) for p in self.geometry.coordinates[0]]
        if ring[0] != ring[-1]:
            ring.append(ring[0])

        props = self.properties
        return Parcel(
            id=props.id,
            ring=ring,
            full_address=props.fullAddress,
            street_name=props.streetName,
            lon=props.lon,
            lat=props.lat,
            site_id=props.siteId,
            tax_coord=props.taxCoord,
            civic_number=props.civicNumber,
        )


def sanitize_parcel_feature(raw: Any) -> Optional[Parcel]:
    """Parcel from a raw GeoJSON feature, or None if it is malformed"""
    if not isinstance(raw, dict):
        return None
    try:
        return ParcelFeature.model_validate(raw).to_parcel()
    except ValidationError as e:
        logger.debug(f"Rejected parcel feature: {e.error_count()} validation errors")
        return None


def normalize_open_data_feature(raw: Any) -> Optional[Dict[str, Any]]:
    """
    Map a city open-data parcel record onto the parcel feature schema

    Source records carry site_id, tax_coord, civic_number, streetname and a
    geo_point_2d reference point.
    """
    if not isinstance(raw, dict):
        return None
    geometry = raw.get("geometry")
    if not isinstance(geometry, dict) or geometry.get("type") != "Polygon":
        return None

    properties = raw.get("properties") or {}
    point = properties.get("geo_point_2d") or {}
    try:
        lon = float(point.get("lon"))
        lat = float(point.get("lat"))
    except (TypeError, ValueError):
        return None
    if math.isnan(lon) or math.isnan(lat):
        return None

    def text(key: str) -> str:
        value = properties.get(key)
        return "" if value is None else str(value)

    site_id = text("site_id")
    civic_number = text("civic_number")
    street_name = text("streetname")
    parcel_id = site_id if properties.get("site_id") is not None else f"{text('tax_coord')}-{civic_number}"

    return {
        "type": "Feature",
        "geometry": geometry,
        "properties": {
            "id": parcel_id,
            "siteId": site_id,
            "taxCoord": text("tax_coord"),
            "civicNumber": civic_number,
            "streetName": street_name,
            "fullAddress": f"{civic_number.strip()} {street_name.strip()}".strip(),
            "lon": lon,
            "lat": lat,
        },
    }


def parse_parcels(collection: Dict[str, Any], open_data: bool = False) -> List[Parcel]:
    """
    Sanitised parcels from a FeatureCollection; malformed records are skipped

    With open_data=True the features are raw city open-data records and are
    mapped onto the parcel schema first.
    """
    raw_features = []
    if isinstance(collection, dict) and isinstance(collection.get("features"), list):
        raw_features = collection["features"]

    parcels = []
    for raw in raw_features:
        if open_data:
            raw = normalize_open_data_feature(raw)
        parcel = sanitize_parcel_feature(raw)
        if parcel is not None:
            parcels.append(parcel)

    skipped = len(raw_features) - len(parcels)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed parcel features")
    logger.info(f"Loaded {len(parcels)} parcels")
    return parcels


def load_parcels(path: Union[str, Path], open_data: bool = False) -> List[Parcel]:
    """Load and sanitise parcels from a GeoJSON file"""
    with open(path, "r", encoding="utf-8") as f:
        collection = json.load(f)
    return parse_parcels(collection, open_data=open_data)


# ============================================================
# Output
# ============================================================

def edge_color(edge_type: EdgeType) -> str:
    return EDGE_COLORS.get(edge_type, EDGE_COLORS[EdgeType.SIDE])


def edge_feature_collection(analysis: Optional[ParcelAnalysis]) -> Dict[str, Any]:
    """One LineString feature per classified edge"""
    if analysis is None:
        return {"type": "FeatureCollection", "features": []}

    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [list(edge.start), list(edge.end)],
                },
                "properties": {
                    "edgeType": edge.edge_type.value,
                    "label": edge.label,
                    "color": edge_color(edge.edge_type),
                },
            }
            for edge in analysis.edges
        ],
    }


def parcel_to_feature(parcel: Parcel) -> Dict[str, Any]:
    """Parcel back in the input feature schema"""
    return {
        "type": "Feature",
        "geometry": {
            "type": "Polygon",
            "coordinates": [[list(p) for p in parcel.ring]],
        },
        "properties": {
            "id": parcel.id,
            "siteId": parcel.site_id,
            "taxCoord": parcel.tax_coord,
            "civicNumber": parcel.civic_number,
            "streetName": parcel.street_name,
            "fullAddress": parcel.full_address,
            "lon": parcel.lon,
            "lat": parcel.lat,
        },
    }
