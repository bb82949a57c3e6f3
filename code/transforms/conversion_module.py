import copy
import logging
import math
import re

from osufile.beatmap import HitCircle, Hold, Slider, SliderPoint, Spinner
from osufile.osu_errors import ConversionError
from transforms.curve_module import slider_points_to_legacy
from transforms.hitsound_module import iter_slider_durations

logger = logging.getLogger(__name__)

STABLE_VERSION = 14
MANIA_MODE = 3
MANIA_KEYS = 4
FORBIDDEN_FILE_NAME_CHARS = re.compile(r'[<>:"/\\|?*]')


def mania_column_position(column, key_count):
	return int((column + 0.5) * 512 / key_count), 192

def beatmap_file_name(bm):
	metadata = bm.metadata
	fields = [metadata["Artist"], metadata["Title"], metadata["Creator"], metadata["Version"]]
	artist, title, creator, version = [FORBIDDEN_FILE_NAME_CHARS.sub('_', x) for x in fields]
	return f"{artist} - {title} ({creator}) [{version}].osu"

def lazer_to_stable(bm):
	"""Rewrites a lazer map so stable can read it: whole millisecond times and single-type slider segments."""
	for point in bm.timing_points:
		point.time = math.floor(point.time)

	for hit_object in bm.hit_objects:
		hit_object.time = math.floor(hit_object.time)
		if not isinstance(hit_object.params, Slider):
			continue
		slider = hit_object.params
		head = SliderPoint(slider.first_curve_type, hit_object.x, hit_object.y)
		points = slider_points_to_legacy([head] + slider.curve_points)
		slider.first_curve_type = points[0].curve_type
		slider.curve_points = points[1:]

	bm.version = STABLE_VERSION

def std_to_mania(bm):
	"""Converts a std map to 4K mania in place and returns the file name it should be saved under.

	Circles go to the first column, sliders become holds in the second column
	with a note per slider edge in the third, spinners become holds in the fourth.
	"""
	if bm.general is None:
		raise ConversionError("beatmap has no [General] section")
	if bm.general["Mode"] != 0:
		raise ConversionError("beatmap is not an osu!standard map")
	if bm.difficulty is None:
		raise ConversionError("beatmap has no [Difficulty] section")
	if bm.metadata is None:
		raise ConversionError("beatmap has no [Metadata] section")

	bm.metadata["Version"] += " - mania"
	bm.general["Mode"] = MANIA_MODE
	bm.difficulty["CircleSize"] = float(MANIA_KEYS)
	key_count = bm.key_count()

	hit_objects = []
	for hit_object, duration in iter_slider_durations(bm):
		params = hit_object.params
		if isinstance(params, HitCircle):
			hit_object.x, hit_object.y = mania_column_position(0, key_count)
			hit_objects.append(hit_object)
		elif isinstance(params, Slider):
			hold = copy.deepcopy(hit_object)
			hold.params = Hold(hit_object.time + duration * params.slides)
			hold.x, hold.y = mania_column_position(1, key_count)
			hit_objects.append(hold)

			for edge in range(params.slides + 1):
				note = copy.deepcopy(hit_object)
				note.time = hit_object.time + edge * duration
				note.params = HitCircle()
				note.x, note.y = mania_column_position(2, key_count)
				if edge < len(params.edge_hitsounds):
					note.hit_sound = params.edge_hitsounds[edge]
				if edge < len(params.edge_samplesets):
					note.hit_sample.normal_set = params.edge_samplesets[edge].normal_set
					note.hit_sample.addition_set = params.edge_samplesets[edge].addition_set
				hit_objects.append(note)
		elif isinstance(params, Spinner):
			hit_object.params = Hold(params.end_time)
			hit_object.x, hit_object.y = mania_column_position(3, key_count)
			hit_objects.append(hit_object)
		else:
			logger.warning(f"Dropping hold note at {hit_object.time}, it has no place in a std map")

	# slider edges land after the objects that follow their slider
	hit_objects.sort(key=lambda x: x.time)
	for hit_object in hit_objects:
		# mania has no combos
		hit_object.combo_skip = None
	bm.hit_objects = hit_objects
	return beatmap_file_name(bm)
