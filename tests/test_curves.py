import math

import numpy as np
import numpy.testing as npt
import pytest

from osufile.beatmap import CurveType, SliderPoint
from osufile.osu_errors import NoControlPointsError, PerfectCurveWithMoreThan3PointsError
from transforms.curve_module import (
	CIRCLE_PRESETS, catmull_to_bezier, circle_arc_properties, slider_points_to_legacy, to_legacy)


def chain(first_type, *coords):
	points = [SliderPoint(CurveType.INHERIT, x, y) for x, y in coords]
	points[0].curve_type = first_type
	return points


def bezier_point(controls, t):
	points = np.array(controls, dtype=float)
	while len(points) > 1:
		points = points[:-1] * (1 - t) + points[1:] * t
	return points[0]


def test_empty_chain():
	with pytest.raises(NoControlPointsError):
		to_legacy([])


def test_linear_two_points():
	npt.assert_array_equal(to_legacy(chain(CurveType.LINEAR, (0, 0), (10, 0))), [[0, 0], [10, 0]])


def test_linear_interior_points_become_red_anchors():
	result = to_legacy(chain(CurveType.LINEAR, (0, 0), (10, 0), (10, 10)))

	npt.assert_array_equal(result, [[0, 0], [10, 0], [10, 0], [10, 10]])


def test_perfect_curve_with_two_points_is_linear():
	npt.assert_array_equal(to_legacy(chain(CurveType.PERFECT_CURVE, (0, 0), (10, 5))), [[0, 0], [10, 5]])


def test_degenerate_arc():
	result = to_legacy(chain(CurveType.PERFECT_CURVE, (0, 0), (5, 0), (10, 0)))

	npt.assert_array_equal(result, [[0, 0], [5, 0], [10, 0]])
	assert not np.isnan(result).any()


def test_perfect_curve_with_four_points():
	with pytest.raises(PerfectCurveWithMoreThan3PointsError) as e:
		to_legacy(chain(CurveType.PERFECT_CURVE, (0, 0), (5, 5), (10, 0), (15, 5)))

	assert e.value.n_points == 4


def test_arc_properties_half_circle():
	center, radius, theta_start, theta_range, direction = circle_arc_properties(
		np.array([0.0, 0.0]), np.array([50.0, 50.0]), np.array([100.0, 0.0]))

	npt.assert_allclose(center, [50, 0])
	assert radius == pytest.approx(50)
	assert theta_range == pytest.approx(math.pi)
	assert direction in (1.0, -1.0)


def test_arc_stays_on_circle_and_keeps_endpoints():
	result = to_legacy(chain(CurveType.PERFECT_CURVE, (0, 0), (50, 50), (100, 0)))

	npt.assert_array_equal(result[0], [0, 0])
	npt.assert_array_equal(result[-1], [100, 0])
	# pi is just past the 5 point preset
	assert len(result) == 6

	curve = np.array([bezier_point(result, t) for t in np.linspace(0, 1, 101)])
	npt.assert_allclose(np.linalg.norm(curve - [50, 0], axis=1), 50, atol=1.0)
	assert np.linalg.norm(curve - [50, 50], axis=1).min() < 2


def test_small_arc_uses_smallest_preset():
	result = to_legacy(chain(CurveType.PERFECT_CURVE, (0, 0), (50, 2), (100, 0)))

	assert len(result) == len(CIRCLE_PRESETS[0].points)


def test_presets_are_immutable():
	with pytest.raises(ValueError):
		CIRCLE_PRESETS[0].points[0, 0] = 2


def test_catmull():
	result = to_legacy(chain(CurveType.CATMULL, (0, 0), (10, 0), (20, 10), (30, 10)))
	rest = np.array([[10, 0], [20, 10], [30, 10]], dtype=float)

	npt.assert_array_equal(result[0], [0, 0])
	npt.assert_allclose(result[1], (-rest[0] + 6 * rest[0] + rest[1]) / 6)
	npt.assert_allclose(result[2], (-rest[2] + 6 * rest[1] + rest[0]) / 6)
	npt.assert_array_equal(result[3], rest[1])
	npt.assert_array_equal(result[-1], rest[2])
	# 1 head + 4 per knot - trailing duplicate
	assert len(result) == 1 + 4 * 2 - 1


def test_catmull_two_points_pass_through():
	points = np.array([[0.0, 0.0], [10.0, 10.0]])

	npt.assert_array_equal(catmull_to_bezier(points), points)


def test_bezier_is_unchanged():
	coords = [(0, 0), (40, 80), (120, 10), (200, 200)]

	npt.assert_array_equal(to_legacy(chain(CurveType.BEZIER, *coords)), coords)


def test_idempotent_on_legacy_chain():
	legacy = slider_points_to_legacy(chain(CurveType.CATMULL, (0, 0), (50, 50), (100, 0), (150, 50)))
	again = slider_points_to_legacy(legacy)

	assert again == legacy
	npt.assert_array_equal(to_legacy(again), to_legacy(legacy))


def test_segments_share_their_boundary_point():
	points = chain(CurveType.LINEAR, (0, 0), (10, 0), (20, 0), (30, 30))
	points[2].curve_type = CurveType.BEZIER

	result = to_legacy(points)

	# linear [0,0 10,0 10,0 20,0] then bezier [20,0 30,30]
	npt.assert_array_equal(result, [[0, 0], [10, 0], [10, 0], [20, 0], [20, 0], [30, 30]])


def test_legacy_short_chains_are_untouched():
	points = chain(CurveType.PERFECT_CURVE, (0, 0), (10, 10))

	assert slider_points_to_legacy(points) == points


def test_legacy_three_points_with_typed_middle_become_linear():
	points = chain(CurveType.BEZIER, (0, 0), (10, 10), (20, 0))
	points[1].curve_type = CurveType.LINEAR

	legacy = slider_points_to_legacy(points)

	assert [p.curve_type for p in legacy] == [CurveType.LINEAR, CurveType.INHERIT, CurveType.INHERIT]
	# the input chain is not modified
	assert points[1].curve_type == CurveType.LINEAR


def test_legacy_three_points_keep_first_type():
	legacy = slider_points_to_legacy(chain(CurveType.PERFECT_CURVE, (0, 0), (10, 10), (20, 0)))

	assert [p.curve_type for p in legacy] == [CurveType.PERFECT_CURVE, CurveType.INHERIT, CurveType.INHERIT]


def test_legacy_long_chain_is_retagged():
	legacy = slider_points_to_legacy(chain(CurveType.LINEAR, (0, 0), (10, 0), (10, 10), (-5, 10)))

	assert legacy[0].curve_type == CurveType.BEZIER
	assert all(p.curve_type == CurveType.INHERIT for p in legacy[1:])
	assert all(isinstance(p.x, int) and isinstance(p.y, int) for p in legacy)
	assert [(p.x, p.y) for p in legacy] == [(0, 0), (10, 0), (10, 0), (10, 10), (10, 10), (-5, 10)]
