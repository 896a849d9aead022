# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import math
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

EARTH_RADIUS_METERS = 6371000

T = TypeVar("T")


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def get_coordinates(location: Optional[dict]) -> Optional[Tuple[float, float]]:
    """Reads {"coordinates": {"latitude", "longitude"}} out of a location dict."""
    if not isinstance(location, dict):
        return None
    coordinates = location.get("coordinates")
    if not isinstance(coordinates, dict):
        return None
    lat = coordinates.get("latitude")
    lng = coordinates.get("longitude")
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None
    return float(lat), float(lng)


def filter_nearby(
    items: Iterable[T],
    latitude: float,
    longitude: float,
    radius_meters: float,
    location_of: Callable[[T], Optional[dict]],
) -> List[Tuple[T, float]]:
    """
    Keeps items with coordinates within radius_meters, nearest first.

    Returns (item, distance_in_meters) pairs.
    """
    nearby = []
    for item in items:
        coordinates = get_coordinates(location_of(item))
        if coordinates is None:
            continue
        distance = calculate_distance(latitude, longitude, *coordinates)
        if distance <= radius_meters:
            nearby.append((item, distance))
    nearby.sort(key=lambda pair: pair[1])
    return nearby


def parse_lat_lng(value: Optional[str]) -> Optional[dict]:
    """Parses a "lat,lng" profile string into {"latitude", "longitude"}."""
    if not isinstance(value, str) or "," not in value:
        return None
    lat_str, lng_str = value.split(",", 1)
    try:
        lat, lng = float(lat_str), float(lng_str)
    except ValueError:
        return None
    if math.isnan(lat) or math.isnan(lng):
        return None
    return {"latitude": lat, "longitude": lng}
