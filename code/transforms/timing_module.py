import copy
import logging

from osufile.beatmap import Break, HitCircle, Hold, Spinner
from osufile.timestamps import between

logger = logging.getLogger(__name__)


def offset_map(bm, millis):
	"""Shifts every timed element of the map by `millis`."""
	for point in bm.timing_points:
		point.time += millis
	for hit_object in bm.hit_objects:
		hit_object.time += millis
		if isinstance(hit_object.params, (Spinner, Hold)):
			hit_object.params.end_time += millis
	for event in bm.events:
		event.start_time += millis
		if isinstance(event.params, Break):
			event.params.end_time += millis
	if bm.editor is not None:
		bm.editor["Bookmarks"] = [x + millis for x in bm.editor["Bookmarks"]]
	if bm.general is not None and bm.general["PreviewTime"] >= 0:
		bm.general["PreviewTime"] += millis

def mix_volume(timing_points, delta):
	for point in timing_points:
		point.volume = min(100, max(0, point.volume + delta))

def reset_hitsounds(timing_points, sample_set):
	for point in timing_points:
		point.sample_set = sample_set
		point.sample_index = 0
		point.volume = 100

def remove_duplicates(timing_points):
	"""Keeps every uninherited point and every inherited point that changes something."""
	if not timing_points:
		return []
	kept = [timing_points[0]]
	for point in timing_points[1:]:
		if point.uninherited or not point.is_duplicate(kept[-1]):
			kept.append(point)
	return kept

def _changes_more_than_speed(point, prev):
	return (point.uninherited
		or point.meter != prev.meter
		or point.effects != prev.effects
		or point.sample_index != prev.sample_index
		or point.sample_set != prev.sample_set
		or point.volume != prev.volume)

def _governs_speed(point, next_point, hit_objects):
	governed = between(hit_objects, point.time, next_point.time)
	return any(not isinstance(x.params, (HitCircle, Spinner)) for x in governed)

def remove_useless_speed_changes(timing_points, hit_objects):
	"""Drops inherited points that only change the slider velocity and have no slider to apply it to.

	A point governs the objects in [point.time, next_point.time).
	"""
	if not timing_points:
		return []

	kept = [timing_points[0]]
	prev = timing_points[0]
	prev_kept = True
	for point in timing_points[1:]:
		if _changes_more_than_speed(point, prev):
			if not prev_kept:
				kept.append(prev)
			kept.append(point)
			prev_kept = True
		else:
			if not prev_kept and _governs_speed(prev, point, hit_objects):
				kept.append(prev)
			prev_kept = False
		prev = point
	if not prev_kept:
		kept.append(prev)
	logger.info(f"Removed {len(timing_points) - len(kept)} useless speed changes")
	return kept

def cleanup_timing_points(bm):
	points = remove_duplicates(bm.timing_points)
	points = remove_useless_speed_changes(points, bm.hit_objects)
	bm.timing_points = remove_duplicates(points)

def inherited_copy(point, time):
	"""A green line at `time` carrying the settings in effect at `point`."""
	point = copy.deepcopy(point)
	point.time = time
	if point.uninherited:
		point.uninherited = False
		point.beat_length = -100.0
	return point
