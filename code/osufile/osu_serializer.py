import io
import logging

import numpy as np

from osufile.beatmap import (
	Background, Break, CurveType, Hold, Slider, Spinner, Video,
	default_difficulty, default_editor, default_general, default_metadata)

logger = logging.getLogger(__name__)

# written even when they hold their default value
general_always = (
	"AudioFilename", "AudioLeadIn", "PreviewTime", "Countdown", "SampleSet",
	"StackLeniency", "Mode", "LetterboxInBreaks", "WidescreenStoryboard",
	"SamplesMatchPlaybackRate")
editor_always = ("DistanceSpacing", "BeatDivisor", "GridSize")
metadata_always = ("Title", "TitleUnicode", "Artist", "ArtistUnicode", "Creator", "Version", "Source")
difficulty_always = tuple(default_difficulty())


def format_float(value):
	"""Shortest positional form that reads back to the same float: 500, 1.4, -1."""
	return np.format_float_positional(float(value), trim='-')

def format_value(value):
	if isinstance(value, bool):
		return "1" if value else "0"
	if isinstance(value, float):
		return format_float(value)
	if isinstance(value, list):
		if value and not isinstance(value[0], str):
			return ','.join(format_float(x) for x in value)
		return ' '.join(str(x) for x in value)
	return str(value)

def format_hit_sample(sample):
	filename = sample.filename if sample.filename is not None else ""
	return ':'.join([
		str(int(sample.normal_set)), str(int(sample.addition_set)),
		str(sample.index), str(sample.volume), filename])

def format_sample_set(sample_set):
	return str(int(sample_set.normal_set)) + ':' + str(int(sample_set.addition_set))

def format_colour(colour):
	rgb = [colour.r, colour.g, colour.b]
	if colour.a is not None:
		rgb.append(colour.a)
	return ','.join(str(x) for x in rgb)

def format_curve_points(first_curve_type, points):
	"""Inverse of `parse_curve_points`.

	The chain letter is always written and every typed point carries its own
	letter, even when it repeats the previous one: a typed first point gives
	`B|B|465:225|...` and consecutive typed points each keep their letter.
	"""
	tokens = []
	if first_curve_type != CurveType.INHERIT:
		tokens.append(first_curve_type.value)
	for point in points:
		if point.curve_type != CurveType.INHERIT:
			tokens.append(point.curve_type.value)
		tokens.append(str(point.x) + ':' + str(point.y))
	return '|'.join(tokens)


class OsuSerializer():
	def _serialize_key_values(self, name, section, defaults, always):
		lines = ["[" + name + "]"]
		for attribute, default in defaults.items():
			value = section.get(attribute, default)
			if attribute not in always and (value is None or value == default):
				continue
			lines.append(attribute + ": " + format_value(value))
		return lines

	def _serialize_general(self, bm):
		return self._serialize_key_values("General", bm.general, default_general(), general_always)

	def _serialize_editor(self, bm):
		return self._serialize_key_values("Editor", bm.editor, default_editor(), editor_always)

	def _serialize_metadata(self, bm):
		return self._serialize_key_values("Metadata", bm.metadata, default_metadata(), metadata_always)

	def _serialize_difficulty(self, bm):
		return self._serialize_key_values("Difficulty", bm.difficulty, default_difficulty(), difficulty_always)

	def _serialize_events(self, bm):
		lines = ["[Events]"]
		for event in bm.events:
			line = event.event_type + ',' + format_float(event.start_time) + ','
			if isinstance(event.params, (Background, Video)):
				line += ','.join([event.params.filename, str(event.params.x_offset), str(event.params.y_offset)])
			elif isinstance(event.params, Break):
				line += format_float(event.params.end_time)
			lines.append(line)
		return lines

	def _serialize_timing_points(self, bm):
		lines = ["[TimingPoints]"]
		for point in bm.timing_points:
			lines.append(','.join([
				format_float(point.time),
				format_float(point.beat_length),
				str(point.meter),
				str(int(point.sample_set)),
				str(point.sample_index),
				str(point.volume),
				format_value(point.uninherited),
				str(point.effects)]))
		return lines

	def _serialize_colours(self, bm):
		lines = ["[Colours]"]
		for i, colour in enumerate(bm.colours.combo):
			lines.append("Combo" + str(i + 1) + ": " + format_colour(colour))
		if bm.colours.slider_track_override is not None:
			lines.append("SliderTrackOverride: " + format_colour(bm.colours.slider_track_override))
		if bm.colours.slider_border is not None:
			lines.append("SliderBorder: " + format_colour(bm.colours.slider_border))
		return lines

	def _serialize_hit_object(self, hit):
		line = ','.join([
			str(hit.x), str(hit.y), format_float(hit.time),
			str(hit.raw_type()), str(hit.hit_sound)])
		params = hit.params
		if isinstance(params, Slider):
			line += ',' + format_curve_points(params.first_curve_type, params.curve_points)
			line += ',' + str(params.slides) + ',' + format_float(params.length)
			if params.edge_hitsounds and params.edge_samplesets:
				line += ',' + '|'.join(str(x) for x in params.edge_hitsounds)
				line += ',' + '|'.join(format_sample_set(x) for x in params.edge_samplesets)
		elif isinstance(params, Spinner):
			line += ',' + format_float(params.end_time)
		elif isinstance(params, Hold):
			return line + ',' + format_float(params.end_time) + ':' + format_hit_sample(hit.hit_sample)
		return line + ',' + format_hit_sample(hit.hit_sample)

	def _serialize_hit_objects(self, bm):
		return ["[HitObjects]"] + [self._serialize_hit_object(hit) for hit in bm.hit_objects]

	def serialize(self, bm, out):
		sections = []
		if bm.general is not None:
			sections.append(self._serialize_general(bm))
		if bm.editor is not None:
			sections.append(self._serialize_editor(bm))
		if bm.metadata is not None:
			sections.append(self._serialize_metadata(bm))
		if bm.difficulty is not None:
			sections.append(self._serialize_difficulty(bm))
		if bm.events:
			sections.append(self._serialize_events(bm))
		if bm.timing_points:
			sections.append(self._serialize_timing_points(bm))
		if bm.colours is not None:
			sections.append(self._serialize_colours(bm))
		if bm.hit_objects:
			sections.append(self._serialize_hit_objects(bm))

		out.write("osu file format v" + str(bm.version) + '\n')
		for section in sections:
			out.write('\n')
			for line in section:
				out.write(line + '\n')

	def serialize_beatmap(self, bm, path):
		logger.info(f"Writing {path}")
		with open(path, 'w', encoding='utf-8', newline='\n') as f:
			self.serialize(bm, f)


def serialize(bm, out):
	OsuSerializer().serialize(bm, out)

def to_string(bm):
	out = io.StringIO()
	serialize(bm, out)
	return out.getvalue()
