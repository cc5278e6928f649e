"""
Geography — Points & Distances

Reading (longitude, latitude) input and ordering cities by distance.

Ordering uses the equirectangular approximation evaluated in the database:
longitude differences are wrapped across the antimeridian, scaled by
cos(latitude of the reference point) and the squared planar distance is
sorted ascending. Good enough for
"nearest first" away from the poles; distance_km gives the great-circle
figure when an actual distance must be reported.

@file geography/geo.py
"""

import math
from collections.abc import Mapping, Sequence

from django.db.models import Case, ExpressionWrapper, F, FloatField, Value, When

from core.exceptions import InvalidGeometryError

EARTH_RADIUS_KM = 6371.0088

LONGITUDE_KEYS = ('lon', 'lng', 'longitude', 'x')
LATITUDE_KEYS = ('lat', 'latitude', 'y')


def _coordinate(value, name):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidGeometryError(detail=f'{name} must be a number, got {value!r}.')
    if math.isnan(number) or math.isinf(number):
        raise InvalidGeometryError(detail=f'{name} must be finite.')
    return number


def _pick(mapping, keys, name):
    for key in keys:
        if key in mapping:
            return mapping[key]
    raise InvalidGeometryError(detail=f'Point is missing {name}.')


def parse_point(value) -> tuple[float, float]:
    """
    Accept (lon, lat), 'lon,lat' or {'lon': .., 'lat': ..} and return a
    validated (longitude, latitude) tuple.
    """
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(',')]
    elif isinstance(value, Mapping):
        parts = [
            _pick(value, LONGITUDE_KEYS, 'longitude'),
            _pick(value, LATITUDE_KEYS, 'latitude'),
        ]
    elif isinstance(value, Sequence):
        parts = list(value)
    else:
        raise InvalidGeometryError(detail=f'Cannot read a point from {value!r}.')

    if len(parts) != 2:
        raise InvalidGeometryError(detail='A point needs exactly two coordinates.')

    lon = _coordinate(parts[0], 'longitude')
    lat = _coordinate(parts[1], 'latitude')
    if not -180.0 <= lon <= 180.0:
        raise InvalidGeometryError(detail=f'Longitude {lon} is out of range.')
    if not -90.0 <= lat <= 90.0:
        raise InvalidGeometryError(detail=f'Latitude {lat} is out of range.')
    return lon, lat


def distance_km(a, b) -> float:
    """Great-circle (haversine) distance between two (lon, lat) points."""
    lon1, lat1 = map(math.radians, a)
    lon2, lat2 = map(math.radians, b)
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def longitude_delta(lon):
    """ORM expression of ``longitude - lon`` wrapped into [-180, 180]."""
    raw = F('longitude') - Value(lon)
    return Case(
        When(longitude__gt=lon + 180.0, then=raw - Value(360.0)),
        When(longitude__lt=lon - 180.0, then=raw + Value(360.0)),
        default=raw,
        output_field=FloatField(),
    )


def planar_distance(point):
    """ORM expression of the squared equirectangular distance to ``point``."""
    lon, lat = point
    scale = math.cos(math.radians(lat))
    dx = longitude_delta(lon) * Value(scale)
    dy = F('latitude') - Value(lat)
    return ExpressionWrapper(dx * dx + dy * dy, output_field=FloatField())
