import logging
import re

from osufile.beatmap import (
	Beatmap, Background, Break, Colour, Colours, CurveType, Event, HitCircle,
	HitObject, HitSample, HitSampleSet, Hold, OVERLAY_POSITIONS, SampleBank,
	Slider, SliderPoint, Spinner, TimingPoint, Video, TYPE_HIT_CIRCLE, TYPE_HOLD,
	TYPE_NEW_COMBO, TYPE_SLIDER, TYPE_SPINNER, COMBO_SKIP_MASK, COMBO_SKIP_SHIFT,
	default_difficulty, default_editor, default_general, default_metadata)
from osufile.osu_errors import (
	FieldParseError, FormatError, ParseError, RecordArityError,
	UnknownSectionError, UnknownVariantError)

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(r"osu file format v(\d+)$")
SECTION_PATTERN = re.compile(r"\[(.*)\]$")
COMBO_PATTERN = re.compile(r"Combo(\d+)$")

BACKGROUND_EVENTS = ("0", "Background")
VIDEO_EVENTS = ("1", "Video")
BREAK_EVENTS = ("2", "Break")
STORYBOARD_EVENTS = (
	"3", "4", "5", "6", "Sample", "Sprite", "Animation",
	"F", "M", "MX", "MY", "S", "V", "R", "C", "L", "T", "P")


def _int(field, raw):
	try:
		return int(raw)
	except ValueError as e:
		raise FieldParseError(field, raw) from e

def _float(field, raw):
	try:
		return float(raw)
	except ValueError as e:
		raise FieldParseError(field, raw) from e

def _bool(field, raw):
	if raw == "0":
		return False
	if raw == "1":
		return True
	raise FieldParseError(field, raw)

def _str(field, raw):
	return raw

def _sample_bank(field, raw):
	value = _int(field, raw)
	try:
		return SampleBank(value)
	except ValueError as e:
		raise UnknownVariantError("sample bank", raw) from e

def _overlay_position(field, raw):
	if raw not in OVERLAY_POSITIONS:
		raise UnknownVariantError("overlay position", raw)
	return raw

def _float_list(field, raw):
	return [_float(field, x.strip()) for x in raw.split(',') if x.strip()]

def _tags(field, raw):
	return raw.split()


general_fields = {
	"AudioFilename" : _str,
	"AudioLeadIn" : _int,
	"AudioHash" : _str,
	"PreviewTime" : _float,
	"Countdown" : _int,
	"SampleSet" : _str,
	"StackLeniency" : _float,
	"Mode" : _int,
	"LetterboxInBreaks" : _bool,
	"StoryFireInFront" : _bool,
	"UseSkinSprites" : _bool,
	"AlwaysShowPlayfield" : _bool,
	"OverlayPosition" : _overlay_position,
	"SkinPreference" : _str,
	"EpilepsyWarning" : _bool,
	"CountdownOffset" : _int,
	"SpecialStyle" : _bool,
	"WidescreenStoryboard" : _bool,
	"SamplesMatchPlaybackRate" : _bool
}

editor_fields = {
	"Bookmarks" : _float_list,
	"DistanceSpacing" : _float,
	"BeatDivisor" : _float,
	"GridSize" : _int,
	"TimelineZoom" : _float
}

metadata_fields = {
	"Title" : _str,
	"TitleUnicode" : _str,
	"Artist" : _str,
	"ArtistUnicode" : _str,
	"Creator" : _str,
	"Version" : _str,
	"Source" : _str,
	"Tags" : _tags,
	"BeatmapID" : _int,
	"BeatmapSetID" : _int
}

difficulty_fields = {
	"HPDrainRate" : _float,
	"CircleSize" : _float,
	"OverallDifficulty" : _float,
	"ApproachRate" : _float,
	"SliderMultiplier" : _float,
	"SliderTickRate" : _float
}


def parse_hit_sample(raw):
	"""`normal:addition[:index:volume:filename]`, an empty string is the default sample."""
	if not raw:
		return HitSample()
	parts = raw.split(':', 4)
	if len(parts) < 2:
		raise RecordArityError("hit sample", "2 to 5", len(parts))
	sample = HitSample(
		normal_set=_sample_bank("normal set", parts[0]),
		addition_set=_sample_bank("addition set", parts[1]))
	if len(parts) > 2:
		sample.index = _int("sample index", parts[2])
	if len(parts) > 3:
		sample.volume = _int("sample volume", parts[3])
	if len(parts) > 4 and parts[4]:
		sample.filename = parts[4]
	return sample

def parse_sample_set(raw):
	parts = raw.split(':')
	if len(parts) != 2:
		raise RecordArityError("edge sample set", "2", len(parts))
	return HitSampleSet(_sample_bank("normal set", parts[0]), _sample_bank("addition set", parts[1]))

def parse_curve_type(raw):
	try:
		return CurveType(raw)
	except ValueError as e:
		raise UnknownVariantError("curve type", raw) from e

def parse_curve_points(raw):
	"""Returns the chain's first curve type and its points.

	A letter after the first one tags only the point that follows it.
	"""
	tokens = raw.split('|')
	if not tokens[0] or ':' in tokens[0]:
		raise UnknownVariantError("curve type", tokens[0])
	first_curve_type = parse_curve_type(tokens[0])
	points = []
	curve_type = CurveType.INHERIT
	for token in tokens[1:]:
		if ':' not in token:
			if not token:
				raise UnknownVariantError("curve type", token)
			curve_type = parse_curve_type(token)
			continue
		x, y = token.split(':', 1)
		points.append(SliderPoint(curve_type, _int("slider point x", x), _int("slider point y", y)))
		curve_type = CurveType.INHERIT
	return first_curve_type, points


class OsuParser():
	def _parse_version(self, lines):
		if not lines:
			raise FormatError("empty file, expected an `osu file format` header")
		line_number, line = lines[0]
		match = HEADER_PATTERN.match(line.strip().lstrip('\ufeff'))
		if match is None:
			raise FormatError("expected an `osu file format v<N>` header", line=line, line_number=line_number)
		return int(match.group(1))

	def _split_key_value(self, line):
		if ':' not in line:
			raise FieldParseError("key: value pair", line)
		key, value = line.split(':', 1)
		return key.strip(), value.strip()

	def _parse_key_value(self, section, fields, line):
		key, value = self._split_key_value(line)
		if key not in fields:
			logger.warning(f"Unknown field {key!r}, ignoring it")
			return
		section[key] = fields[key](key, value)

	def _parse_general(self, bm, line):
		self._parse_key_value(bm.general, general_fields, line)

	def _parse_editor(self, bm, line):
		self._parse_key_value(bm.editor, editor_fields, line)

	def _parse_metadata(self, bm, line):
		self._parse_key_value(bm.metadata, metadata_fields, line)

	def _parse_difficulty(self, bm, line):
		self._parse_key_value(bm.difficulty, difficulty_fields, line)

	def _parse_events(self, bm, line):
		if line[0] in (' ', '_'):
			logger.debug(f"Skipping storyboard command {line!r}")
			return
		x = [token.strip() for token in line.split(',')]
		kind = x[0]
		if kind in STORYBOARD_EVENTS:
			logger.debug(f"Skipping storyboard event {line!r}")
			return
		if kind in BACKGROUND_EVENTS or kind in VIDEO_EVENTS:
			if not 3 <= len(x) <= 5:
				raise RecordArityError(kind + " event", "3 to 5", len(x))
			offsets = [_int("event offset", y) for y in x[3:]] + [0] * (5 - len(x))
			params_type = Background if kind in BACKGROUND_EVENTS else Video
			params = params_type(x[2], *offsets)
		elif kind in BREAK_EVENTS:
			if len(x) != 3:
				raise RecordArityError("break event", "3", len(x))
			params = Break(_float("break end time", x[2]))
		else:
			raise UnknownVariantError("event type", kind)
		bm.events.append(Event(kind, _float("event start time", x[1]), params))

	def _parse_timing_points(self, bm, line):
		x = line.split(',')
		if not 2 <= len(x) <= 8:
			raise RecordArityError("timing point", "2 to 8", len(x))
		point = TimingPoint(time=_float("time", x[0]), beat_length=_float("beat length", x[1]))
		if len(x) > 2:
			point.meter = _int("meter", x[2])
		if len(x) > 3:
			point.sample_set = _sample_bank("sample set", x[3])
		if len(x) > 4:
			point.sample_index = _int("sample index", x[4])
		if len(x) > 5:
			point.volume = _int("volume", x[5])
		if len(x) > 6:
			point.uninherited = _bool("uninherited", x[6])
		if len(x) > 7:
			point.effects = _int("effects", x[7])
		bm.timing_points.append(point)

	def _parse_colour(self, key, raw):
		rgb = [_int(key, y.strip()) for y in raw.split(',')]
		if not 3 <= len(rgb) <= 4:
			raise RecordArityError(key + " colour", "3 or 4", len(rgb))
		return Colour(*rgb)

	def _parse_colours(self, bm, line):
		key, value = self._split_key_value(line)
		if COMBO_PATTERN.match(key):
			bm.colours.combo.append(self._parse_colour(key, value))
		elif key == "SliderTrackOverride":
			bm.colours.slider_track_override = self._parse_colour(key, value)
		elif key == "SliderBorder":
			bm.colours.slider_border = self._parse_colour(key, value)
		else:
			logger.warning(f"Unknown colour {key!r}, ignoring it")

	def _parse_slider(self, parameters):
		if len(parameters) < 3:
			raise RecordArityError("slider", "at least 8", len(parameters) + 5)
		first_curve_type, points = parse_curve_points(parameters[0])
		params = Slider(
			first_curve_type=first_curve_type,
			curve_points=points,
			slides=_int("slides", parameters[1]),
			length=_float("length", parameters[2]))
		leftover = parameters[3:]
		hit_sample = ""
		if len(leftover) >= 2:
			params.edge_hitsounds = [_int("edge hitsound", y) for y in leftover[0].split('|')]
			params.edge_samplesets = [parse_sample_set(y) for y in leftover[1].split('|')]
			if len(leftover) > 2:
				hit_sample = leftover[2]
		else:
			params.edge_hitsounds = [0] * (params.slides + 1)
			params.edge_samplesets = [HitSampleSet() for _ in range(params.slides + 1)]
			if leftover:
				hit_sample = leftover[0]
		return params, hit_sample

	def parse_hit_object(self, line):
		"""A single `[HitObjects]` line as a HitObject."""
		x = line.split(',')
		if len(x) < 5:
			raise RecordArityError("hit object", "at least 5", len(x))
		raw_type = _int("type", x[3])
		hit_sample = ""
		if raw_type & TYPE_HIT_CIRCLE:
			params = HitCircle()
			if len(x) > 5:
				hit_sample = x[5]
		elif raw_type & TYPE_SLIDER:
			params, hit_sample = self._parse_slider(x[5:])
		elif raw_type & TYPE_SPINNER:
			if len(x) < 6:
				raise RecordArityError("spinner", "at least 6", len(x))
			params = Spinner(_float("end time", x[5]))
			if len(x) > 6:
				hit_sample = x[6]
		elif raw_type & TYPE_HOLD:
			if len(x) < 6:
				raise RecordArityError("hold", "at least 6", len(x))
			end_time, _, hit_sample = x[5].partition(':')
			params = Hold(_float("end time", end_time))
		else:
			raise UnknownVariantError("hit object type", x[3])

		combo_skip = None
		if raw_type & TYPE_NEW_COMBO:
			combo_skip = (raw_type >> COMBO_SKIP_SHIFT) & COMBO_SKIP_MASK
		return HitObject(
			x=_int("x", x[0]),
			y=_int("y", x[1]),
			time=_float("time", x[2]),
			params=params,
			hit_sound=_int("hitsound", x[4]),
			hit_sample=parse_hit_sample(hit_sample),
			combo_skip=combo_skip)

	def _parse_hit_objects(self, bm, line):
		bm.hit_objects.append(self.parse_hit_object(line))

	def _open_section(self, bm, name):
		# a repeated header keeps filling the section already opened
		if name == "General" and bm.general is None:
			bm.general = default_general()
		elif name == "Editor" and bm.editor is None:
			bm.editor = default_editor()
		elif name == "Metadata" and bm.metadata is None:
			bm.metadata = default_metadata()
		elif name == "Difficulty" and bm.difficulty is None:
			bm.difficulty = default_difficulty()
		elif name == "Colours" and bm.colours is None:
			bm.colours = Colours()

	parse_sections = {
		"General" : _parse_general,
		"Editor" : _parse_editor,
		"Metadata" : _parse_metadata,
		"Difficulty" : _parse_difficulty,
		"Events" : _parse_events,
		"TimingPoints" : _parse_timing_points,
		"Colours" : _parse_colours,
		"HitObjects" : _parse_hit_objects
	}

	def _significant_lines(self, text):
		for line_number, line in enumerate(text.splitlines(), 1):
			stripped = line.strip()
			if not stripped or stripped.startswith("//"):
				continue
			yield line_number, line.rstrip()

	def parse(self, text):
		bm = Beatmap()
		lines = list(self._significant_lines(text.lstrip('\ufeff')))
		bm.version = self._parse_version(lines)

		section = None
		for line_number, line in lines[1:]:
			header = SECTION_PATTERN.match(line.strip())
			if header is not None:
				section = header.group(1)
				if section not in self.parse_sections:
					raise UnknownSectionError(section, line=line, line_number=line_number)
				self._open_section(bm, section)
				continue
			if section is None:
				raise FormatError("content before the first section header", line=line, line_number=line_number)
			try:
				self.parse_sections[section](self, bm, line)
			except ParseError as e:
				raise e.locate(section, line, line_number)
		return bm

	def parse_map(self, beatmapfile):
		logger.info(f"Parsing {beatmapfile}")
		with open(beatmapfile, "r", encoding="utf-8") as f:
			try:
				text = f.read()
			except UnicodeDecodeError as e:
				raise FormatError("file is not UTF-8 text") from e
		return self.parse(text)


def parse(text):
	return OsuParser().parse(text)
