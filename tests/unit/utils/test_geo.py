import math

import pytest

from freelookup.domain.errors import InvalidQueryError
from freelookup.utils.geo import EARTH_RADIUS_KM, haversine_km, validate_coordinates

BERLIN = (52.5200, 13.4050)
PARIS = (48.8566, 2.3522)


def test_berlin_to_paris():
    assert haversine_km(*BERLIN, *PARIS) == pytest.approx(877.5, abs=2.0)


def test_distance_is_symmetric_and_zero_for_same_point():
    assert haversine_km(*BERLIN, *PARIS) == pytest.approx(haversine_km(*PARIS, *BERLIN))
    assert haversine_km(*BERLIN, *BERLIN) == 0.0


def test_antipodal_points_are_half_the_circumference():
    assert haversine_km(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * EARTH_RADIUS_KM)


@pytest.mark.parametrize("lat, lon", [(90.0, 180.0), (-90.0, -180.0), (0.0, 0.0)])
def test_boundaries_are_valid(lat, lon):
    validate_coordinates(lat, lon)


@pytest.mark.parametrize("lat, lon", [(90.01, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0), (float("nan"), 0.0)])
def test_out_of_range_coordinates_are_rejected(lat, lon):
    with pytest.raises(InvalidQueryError):
        validate_coordinates(lat, lon)


def test_haversine_validates_both_points():
    with pytest.raises(InvalidQueryError, match="Latitude 95"):
        haversine_km(0.0, 0.0, 95.0, 0.0)
