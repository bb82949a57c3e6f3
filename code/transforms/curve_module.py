import math
import sys

import numpy as np

from osufile.beatmap import CurveType, SliderPoint
from osufile.osu_errors import NoControlPointsError, PerfectCurveWithMoreThan3PointsError

ARC_TOLERANCE = 1e-6


class CirclePreset():
	"""Bezier control points approximating a unit arc that starts at (1, 0) and sweeps up to `max_angle`."""

	def __init__(self, max_angle, points):
		self.max_angle = max_angle
		self.points = np.array(points, dtype=np.float64)
		self.points.setflags(write=False)


CIRCLE_PRESETS = (
	CirclePreset(0.4993379862754501, [
		[1.0, 0.0],
		[1.0, 0.2549893626632736],
		[0.8778997558480327, 0.47884446188920726]]),
	CirclePreset(1.7579419829169447, [
		[1.0, 0.0],
		[1.0, 0.6263026],
		[0.42931178, 1.0990661],
		[-0.18605515, 0.9825393]]),
	CirclePreset(3.1385246920140215, [
		[1.0, 0.0],
		[1.0, 0.87084764],
		[0.002304826, 1.5033062],
		[-0.9973236, 0.8739115],
		[-0.9999953, 0.0030679568]]),
	CirclePreset(5.69720464620727, [
		[1.0, 0.0],
		[1.0, 1.4137783],
		[-1.4305235, 2.0779421],
		[-2.3410065, -0.94017583],
		[0.05132711, -1.7309346],
		[0.8331702, -0.5530167]]),
	CirclePreset(math.tau, [
		[1.0, 0.0],
		[1.0, 1.2447058],
		[-0.8526471, 2.118367],
		[-2.6211002, 7.854936e-06],
		[-0.8526448, -2.118357],
		[1.0, -1.2447058],
		[1.0, 0.0]])
)


def _to_array(points):
	return np.array([[p.x, p.y] for p in points], dtype=np.float64).reshape(-1, 2)

def _split_segments(points):
	# a typed point closes the running segment and opens the next one
	segments = []
	start = 0
	for i, point in enumerate(points):
		if i == start:
			continue
		if point.curve_type != CurveType.INHERIT:
			segments.append(points[start:i + 1])
			start = i
	if start != len(points) - 1 or not segments:
		segments.append(points[start:])
	return segments

def linear_to_bezier(points):
	if len(points) < 2:
		return points.copy()
	interior = np.repeat(points[1:-1], 2, axis=0)
	return np.concatenate([points[:1], interior, points[-1:]])

def catmull_to_bezier(points):
	first, rest = points[0], points[1:]
	if len(rest) < 2:
		return points.copy()
	cubics = [first]
	n = len(rest)
	for i in range(n - 1):
		v1 = rest[i - 1] if i > 0 else rest[i]
		v2 = rest[i]
		v3 = rest[i + 1] if i < n - 1 else 2 * v2 - v1
		v4 = rest[i + 2] if i < n - 2 else 2 * v3 - v2
		cubics.append((-v1 + 6 * v2 + v3) / 6)
		cubics.append((-v4 + 6 * v3 + v2) / 6)
		cubics.append(v3)
		cubics.append(v3)
	return np.array(cubics[:-1])

def circle_arc_properties(a, b, c):
	"""Center, radius, start angle, sweep and direction of the arc through a, b and c.

	None when the three points are collinear.
	"""
	if abs((b[1] - a[1]) * (c[0] - a[0]) - (b[0] - a[0]) * (c[1] - a[1])) <= sys.float_info.epsilon:
		return None

	d = 2 * (a[0] * (b - c)[1] + b[0] * (c - a)[1] + c[0] * (a - b)[1])
	a_sq, b_sq, c_sq = a.dot(a), b.dot(b), c.dot(c)
	center = np.array([
		a_sq * (b - c)[1] + b_sq * (c - a)[1] + c_sq * (a - b)[1],
		a_sq * (c - b)[0] + b_sq * (a - c)[0] + c_sq * (b - a)[0]]) / d

	da = a - center
	dc = c - center
	radius = np.linalg.norm(da)
	theta_start = math.atan2(da[1], da[0])
	theta_end = math.atan2(dc[1], dc[0])
	theta_end += math.tau * math.ceil((theta_start - theta_end) / math.tau)

	theta_range = theta_end - theta_start
	direction = 1.0
	ortho_a_to_c = np.array([(c - a)[1], -(c - a)[0]])
	if ortho_a_to_c.dot(b - a) < 0:
		direction = -direction
		theta_range = math.tau - theta_range
	return center, radius, theta_start, theta_range, direction

def circle_to_bezier(points):
	properties = circle_arc_properties(*points)
	if properties is None:
		return points.copy()
	center, radius, theta_start, theta_range, direction = properties

	preset = next((p for p in CIRCLE_PRESETS if p.max_angle >= theta_range), CIRCLE_PRESETS[-1])
	arc = preset.points.copy()
	arc_len = preset.max_angle
	n = len(arc) - 1

	tf = theta_range / arc_len
	while abs(tf - 1) > ARC_TOLERANCE:
		for j in range(n):
			for i in range(n, j, -1):
				arc[i] = arc[i] * tf + arc[i - 1] * (1 - tf)
		arc_len = math.atan2(arc[-1][1], arc[-1][0])
		if arc_len < 0:
			arc_len += math.tau
		tf = theta_range / arc_len

	rotation = np.array([
		[math.cos(theta_start), -math.sin(theta_start) * direction],
		[math.sin(theta_start), math.cos(theta_start) * direction]]) * radius
	arc = arc @ rotation.T + center

	arc[0] = points[0]
	arc[-1] = points[-1]
	return arc

def segment_to_bezier(segment):
	points = _to_array(segment)
	curve_type = segment[0].curve_type
	if curve_type == CurveType.LINEAR:
		return linear_to_bezier(points)
	if curve_type == CurveType.PERFECT_CURVE:
		if len(points) == 2:
			return linear_to_bezier(points)
		if len(points) == 3:
			return circle_to_bezier(points)
		raise PerfectCurveWithMoreThan3PointsError(len(points))
	if curve_type == CurveType.CATMULL:
		return catmull_to_bezier(points)
	return points

def to_legacy(points):
	"""Bezier anchors, as an (n, 2) float array, tracing the same path as the typed chain `points`.

	Consecutive segments share their boundary point, which turns it into a red anchor.
	"""
	if not points:
		raise NoControlPointsError()
	return np.concatenate([segment_to_bezier(s) for s in _split_segments(points)])

def slider_points_to_legacy(points):
	"""Re-tags a slider chain so it only uses what `osu file format v14` understands."""
	if len(points) <= 2:
		return [SliderPoint(p.curve_type, p.x, p.y) for p in points]
	if len(points) == 3:
		points = [SliderPoint(p.curve_type, p.x, p.y) for p in points]
		# a typed middle point makes the 3-point slider linear
		if points[1].curve_type != CurveType.INHERIT:
			points[0].curve_type = CurveType.LINEAR
			points[1].curve_type = CurveType.INHERIT
		points[2].curve_type = CurveType.INHERIT
		return points

	anchors = to_legacy(points)
	legacy = [SliderPoint(CurveType.INHERIT, int(x), int(y)) for x, y in anchors]
	legacy[0].curve_type = CurveType.BEZIER
	return legacy
