"""
Tests — Point parsing and distances.

@file geography/tests/test_geo.py
"""

import math

import pytest

from core.exceptions import InvalidGeometryError
from geography.geo import distance_km, parse_point


class TestParsePoint:
    @pytest.mark.parametrize('value', [
        '-46.63,-23.55',
        ' -46.63 , -23.55 ',
        (-46.63, -23.55),
        [-46.63, -23.55],
        ['-46.63', '-23.55'],
        {'lon': -46.63, 'lat': -23.55},
        {'lng': -46.63, 'latitude': -23.55},
        {'x': -46.63, 'y': -23.55},
    ])
    def test_accepted_shapes(self, value):
        assert parse_point(value) == (-46.63, -23.55)

    @pytest.mark.parametrize('value', [
        '',
        '10',
        '1,2,3',
        'abc,10',
        (1,),
        (200, 0),
        (0, -91),
        (float('nan'), 0),
        (0, float('inf')),
        {'lon': 10},
        None,
        42,
    ])
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidGeometryError):
            parse_point(value)

    def test_error_status(self):
        with pytest.raises(InvalidGeometryError) as exc_info:
            parse_point('nowhere')
        assert exc_info.value.status_code == 400
        assert exc_info.value.default_code == 'INVALID_GEOMETRY'


class TestDistance:
    def test_same_point(self):
        assert distance_km((10, 10), (10, 10)) == 0

    def test_one_degree_on_equator(self):
        assert math.isclose(distance_km((0, 0), (1, 0)), 111.195, rel_tol=1e-3)

    def test_symmetric(self):
        sp, rj = (-46.63, -23.55), (-43.2, -22.9)
        assert distance_km(sp, rj) == pytest.approx(distance_km(rj, sp))
        assert 350 < distance_km(sp, rj) < 370

    def test_across_antimeridian(self):
        assert distance_km((179.9, 0), (-179.9, 0)) == pytest.approx(22.24, rel=1e-2)
