import pytest

from applemosaic.layout import (CellSize, DegenerateGridError, Resolution,
                                SurfaceDimensions, compute_cell_size,
                                grid_points)


@pytest.mark.parametrize("surface, resolution, expected", [
    ((300, 300), (15, 15), (20, 20)),
    ((640, 360), (15, 15), (42, 24)),
    ((100, 50), (3, 7), (33, 7)),
    ((15, 15), (15, 15), (1, 1)),
])
def test_cell_size_is_floor_division(surface, resolution, expected):
    cell = compute_cell_size(SurfaceDimensions(*surface), Resolution(*resolution))
    assert cell.as_tuple() == expected
    assert not cell.is_degenerate


def test_resolution_larger_than_surface_degenerates():
    cell = compute_cell_size(SurfaceDimensions(10, 300), Resolution(15, 15))
    assert cell == CellSize(0, 20)
    assert cell.is_degenerate


def test_grid_points_cover_surface_once():
    points = grid_points(SurfaceDimensions(50, 30), CellSize(20, 10))
    assert points == [
        (0, 0), (20, 0), (40, 0),
        (0, 10), (20, 10), (40, 10),
        (0, 20), (20, 20), (40, 20),
    ]
    assert len(set(points)) == len(points)


def test_grid_points_for_default_grid():
    points = grid_points(SurfaceDimensions(300, 300), CellSize(20, 20))
    assert len(points) == 225
    assert points[0] == (0, 0)
    assert points[-1] == (280, 280)


def test_remainder_pixels_get_an_extra_column():
    # 305 / 15 floors to 20, so x = 300 is still inside the surface
    points = grid_points(SurfaceDimensions(305, 20), CellSize(20, 20))
    assert [x for x, _ in points] == list(range(0, 305, 20))


@pytest.mark.parametrize("cell", [CellSize(0, 20), CellSize(20, 0),
                                  CellSize(0, 0), CellSize(-1, 5)])
def test_degenerate_cell_raises(cell):
    with pytest.raises(DegenerateGridError):
        grid_points(SurfaceDimensions(300, 300), cell)


def test_degenerate_grid_error_is_value_error():
    assert issubclass(DegenerateGridError, ValueError)
