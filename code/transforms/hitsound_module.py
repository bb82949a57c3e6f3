import copy
import logging

from osufile.beatmap import (
	HITSOUND_CLAP, HITSOUND_FINISH, HITSOUND_NONE, HITSOUND_WHISTLE,
	HitSample, HitSampleSet, SampleBank, Slider, Spinner, default_difficulty)
from osufile.timestamps import LEFT, between, close_range, group_by_closeness, interleave, is_close
from transforms.timing_module import inherited_copy

logger = logging.getLogger(__name__)


def slider_duration(slider_length, beat_length, slider_multiplier, velocity):
	"""Time in ms a single slide of the slider takes."""
	return slider_length * beat_length / (slider_multiplier * 100 * velocity)

def iter_slider_durations(bm):
	"""Yields (hit_object, slide_duration) in order, the duration is None for non-sliders."""
	difficulty = bm.difficulty if bm.difficulty is not None else default_difficulty()
	slider_multiplier = difficulty["SliderMultiplier"]
	beat_length = 0.0
	velocity = 1.0
	for side, item in interleave(bm.timing_points, bm.hit_objects):
		if side == LEFT:
			if item.uninherited:
				beat_length = item.beat_length
				velocity = 1.0
			else:
				velocity = item.slider_velocity
		elif isinstance(item.params, Slider):
			yield item, slider_duration(item.params.length, beat_length, slider_multiplier, velocity)
		else:
			yield item, None

def clear_hitsounds(hit_objects):
	for hit_object in hit_objects:
		hit_object.hit_sample = HitSample()
		hit_object.hit_sound = HITSOUND_NONE
		if isinstance(hit_object.params, Slider):
			hit_object.params.edge_hitsounds = [HITSOUND_NONE] * len(hit_object.params.edge_hitsounds)
			hit_object.params.edge_samplesets = [HitSampleSet() for _ in hit_object.params.edge_samplesets]

def merge_hit_sample(hit_object, sounds):
	"""Combines the hitsound information of every object in `sounds` into `hit_object`."""
	for sound in sounds:
		logger.debug(f"Hitsounding object at {hit_object.time}")
		sample = sound.hit_sample
		if sample.normal_set != SampleBank.AUTO:
			hit_object.hit_sample.normal_set = sample.normal_set
		if sample.addition_set != SampleBank.AUTO:
			hit_object.hit_sample.addition_set = sample.addition_set
		hit_object.hit_sample.index = sample.index
		hit_object.hit_sample.volume = sample.volume
		if sample.filename is not None:
			hit_object.hit_sample.filename = sample.filename
		hit_object.hit_sound |= sound.hit_sound

def merge_edge_sounds(slider, edge, sounds):
	for sound in sounds:
		sample = sound.hit_sample
		if sample.normal_set != SampleBank.AUTO:
			slider.edge_samplesets[edge].normal_set = sample.normal_set
		if sample.addition_set != SampleBank.AUTO:
			slider.edge_samplesets[edge].addition_set = sample.addition_set
		slider.edge_hitsounds[edge] |= sound.hit_sound

def _copy_point_sounds(point, sound_point):
	point.sample_set = sound_point.sample_set
	point.sample_index = sound_point.sample_index
	point.volume = sound_point.volume

def merge_timing_point_sounds(timing_points, sound_points):
	"""Timing points carrying the sample data of `sound_points`.

	A sound point with no timing point close to it becomes an inherited copy of the point before it.
	"""
	if not sound_points:
		return list(timing_points)
	merged = []
	last_sound = sound_points[0]
	for side, point in interleave(timing_points, sound_points):
		if side == LEFT:
			point = copy.deepcopy(point)
			_copy_point_sounds(point, last_sound)
			merged.append(point)
			continue

		last_sound = point
		if not merged:
			continue
		target = merged[-1]
		if not is_close(target.time, point.time):
			target = inherited_copy(target, point.time)
			merged.append(target)
		_copy_point_sounds(target, point)
	return merged

def spread_mania_hitsounds(hit_objects):
	"""Spreads the additions of each row of simultaneous notes across the row, one per note."""
	for group in group_by_closeness(hit_objects):
		if len(group) < 2:
			continue
		first, remains = group[0], group[1:]
		if first.hit_sample.normal_set != SampleBank.AUTO:
			for other in remains:
				other.hit_sample.normal_set = SampleBank.AUTO
		if first.hit_sample.addition_set != SampleBank.AUTO:
			first.hit_sample.addition_set = SampleBank.AUTO

		hit_sound = first.hit_sound
		for hit_object in group:
			hit_object.hit_sound = HITSOUND_NONE
		cycle = 0
		for flag in (HITSOUND_WHISTLE, HITSOUND_FINISH, HITSOUND_CLAP):
			if hit_sound & flag:
				remains[cycle].hit_sound |= flag
				cycle = (cycle + 1) % len(remains)

def splat_hitsounds(bm, soundmap, mania=False):
	"""Copies the hitsounds of `soundmap` onto the objects of `bm` sitting at the same time."""
	logger.info("Resetting beatmap's hitsounds")
	clear_hitsounds(bm.hit_objects)

	logger.info("Inserting soundmap's timing points")
	bm.timing_points = merge_timing_point_sounds(bm.timing_points, soundmap.timing_points)

	logger.info("Inserting soundmap's hitsounds")
	sounds = soundmap.hit_objects
	for hit_object, duration in iter_slider_durations(bm):
		if isinstance(hit_object.params, Spinner):
			merge_hit_sample(hit_object, between(sounds, *close_range(hit_object.params.end_time)))
			continue
		merge_hit_sample(hit_object, between(sounds, *close_range(hit_object.time)))
		if duration is not None:
			slider = hit_object.params
			for edge in range(min(len(slider.edge_hitsounds), len(slider.edge_samplesets))):
				edge_time = hit_object.time + edge * duration
				merge_edge_sounds(slider, edge, between(sounds, *close_range(edge_time)))

	if mania:
		logger.info("Applying mania hitsound spread-out transformation")
		spread_mania_hitsounds(bm.hit_objects)
