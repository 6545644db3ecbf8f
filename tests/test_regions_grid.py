import pytest

from hydrator.core import regions
from hydrator.core.grid import generate_grid
from hydrator.core.regions import Bounds


def test_lookup_is_case_insensitive():
    assert regions.lookup("CALGARY").name == "Calgary"
    assert regions.lookup("  New York ").country == "USA"


def test_lookup_unknown_city_raises():
    with pytest.raises(regions.UnknownCityError) as excinfo:
        regions.lookup("Atlantis")
    assert "Atlantis" in str(excinfo.value)


def test_lookup_does_not_fuzzy_match():
    with pytest.raises(regions.UnknownCityError):
        regions.lookup("calg")


def test_registry_bounds_contain_centres():
    for region in regions.CITY_BOUNDS.values():
        assert region.bounds.contains(region.lat, region.lng), region.name


def test_supported_cities_sorted():
    cities = regions.supported_cities()
    assert cities == sorted(cities)
    assert "dubai" in cities


def test_degenerate_bounds_rejected():
    with pytest.raises(ValueError):
        Bounds(north=1.0, south=2.0, east=1.0, west=0.0)


def test_density_one_yields_four_points(testville):
    points = generate_grid(testville.bounds, 1)
    assert len(points) == 4
    assert points[0].lat == pytest.approx(10.25)
    assert points[0].lng == pytest.approx(20.25)
    assert points[-1].lat == pytest.approx(10.75)
    assert points[-1].lng == pytest.approx(20.75)


@pytest.mark.parametrize("density", [0, 1, 4, 5, 9])
def test_grid_points_count_and_strictly_inside(density):
    bounds = regions.lookup("london").bounds
    points = generate_grid(bounds, density)
    assert len(points) == (density + 1) ** 2
    assert all(bounds.contains(p.lat, p.lng) for p in points)
    assert len(set(points)) == len(points)


def test_grid_is_deterministic(testville):
    assert generate_grid(testville.bounds, 4) == generate_grid(testville.bounds, 4)


def test_negative_density_rejected(testville):
    with pytest.raises(ValueError):
        generate_grid(testville.bounds, -1)
