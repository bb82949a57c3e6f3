import sys
from dataclasses import dataclass, field
from enum import Enum, IntEnum


class SampleBank(IntEnum):
	AUTO = 0
	NORMAL = 1
	SOFT = 2
	DRUM = 3


class CurveType(Enum):
	INHERIT = ""
	BEZIER = "B"
	CATMULL = "C"
	LINEAR = "L"
	PERFECT_CURVE = "P"


# hit_sound bits
HITSOUND_NONE = 0
HITSOUND_NORMAL = 1
HITSOUND_WHISTLE = 2
HITSOUND_FINISH = 4
HITSOUND_CLAP = 8

# object type bits
TYPE_HIT_CIRCLE = 1 << 0
TYPE_SLIDER = 1 << 1
TYPE_NEW_COMBO = 1 << 2
TYPE_SPINNER = 1 << 3
TYPE_HOLD = 1 << 7
COMBO_SKIP_SHIFT = 4
COMBO_SKIP_MASK = 0b111

OVERLAY_POSITIONS = ("NoChange", "Below", "Above")


def default_general():
	return {
		"AudioFilename" : "",
		"AudioLeadIn" : 0,
		#Deprecated
		"AudioHash" : None,
		"PreviewTime" : -1.0,
		"Countdown" : 1,
		"SampleSet" : "Normal",
		"StackLeniency" : 0.7,
		"Mode" : 0,
		"LetterboxInBreaks" : False,
		#Deprecated
		"StoryFireInFront" : True,
		"UseSkinSprites" : False,
		#Deprecated
		"AlwaysShowPlayfield" : False,
		"OverlayPosition" : "NoChange",
		"SkinPreference" : None,
		"EpilepsyWarning" : False,
		"CountdownOffset" : 0,
		"SpecialStyle" : False,
		"WidescreenStoryboard" : False,
		"SamplesMatchPlaybackRate" : False
	}

def default_editor():
	return {
		"Bookmarks" : [],
		"DistanceSpacing" : 1.1,
		"BeatDivisor" : 4.0,
		"GridSize" : 4,
		"TimelineZoom" : None
	}

def default_metadata():
	return {
		"Title" : "",
		"TitleUnicode" : "",
		"Artist" : "",
		"ArtistUnicode" : "",
		"Creator" : "",
		"Version" : "",
		"Source" : "",
		"Tags" : [],
		"BeatmapID" : None,
		"BeatmapSetID" : None
	}

def default_difficulty():
	return {
		"HPDrainRate" : 5.0,
		"CircleSize" : 5.0,
		"OverallDifficulty" : 5.0,
		"ApproachRate" : 5.0,
		"SliderMultiplier" : 1.0,
		"SliderTickRate" : 1.0
	}


@dataclass
class HitSampleSet:
	normal_set: SampleBank = SampleBank.AUTO
	addition_set: SampleBank = SampleBank.AUTO


@dataclass
class HitSample:
	normal_set: SampleBank = SampleBank.AUTO
	addition_set: SampleBank = SampleBank.AUTO
	index: int = 0
	# rare maps go past 100, never clamped
	volume: int = 0
	filename: str = None


@dataclass
class TimingPoint:
	time: float = 0.0
	# ms per beat when uninherited, -100 / slider velocity otherwise
	beat_length: float = 0.0
	# negative in a few ranked maps
	meter: int = 4
	sample_set: SampleBank = SampleBank.AUTO
	sample_index: int = 0
	volume: int = 100
	uninherited: bool = True
	effects: int = 0

	def timestamp(self):
		return self.time

	def is_duplicate(self, other):
		return (abs(self.beat_length - other.beat_length) < sys.float_info.epsilon
			and self.meter == other.meter
			and self.sample_set == other.sample_set
			and self.sample_index == other.sample_index
			and self.volume == other.volume
			and self.effects == other.effects)

	@property
	def slider_velocity(self):
		return -100 / self.beat_length


@dataclass
class SliderPoint:
	curve_type: CurveType
	x: int
	y: int


@dataclass
class HitCircle:
	pass


@dataclass
class Slider:
	first_curve_type: CurveType = CurveType.BEZIER
	curve_points: list = field(default_factory=list)
	slides: int = 1
	length: float = 0.0
	edge_hitsounds: list = field(default_factory=list)
	edge_samplesets: list = field(default_factory=list)


@dataclass
class Spinner:
	end_time: float = 0.0


@dataclass
class Hold:
	end_time: float = 0.0


@dataclass
class HitObject:
	x: int = 256
	y: int = 192
	time: float = 0.0
	params: object = field(default_factory=HitCircle)
	hit_sound: int = HITSOUND_NONE
	hit_sample: HitSample = field(default_factory=HitSample)
	# None unless the object starts a new combo
	combo_skip: int = None

	def timestamp(self):
		return self.time

	def raw_type(self):
		if isinstance(self.params, Slider):
			raw = TYPE_SLIDER
		elif isinstance(self.params, Spinner):
			raw = TYPE_SPINNER
		elif isinstance(self.params, Hold):
			raw = TYPE_HOLD
		else:
			raw = TYPE_HIT_CIRCLE
		if self.combo_skip is not None:
			raw |= TYPE_NEW_COMBO | (self.combo_skip & COMBO_SKIP_MASK) << COMBO_SKIP_SHIFT
		return raw


@dataclass
class Colour:
	r: int
	g: int
	b: int
	a: int = None


@dataclass
class Colours:
	combo: list = field(default_factory=list)
	slider_track_override: Colour = None
	slider_border: Colour = None


@dataclass
class Background:
	filename: str
	x_offset: int = 0
	y_offset: int = 0


@dataclass
class Video:
	filename: str
	x_offset: int = 0
	y_offset: int = 0


@dataclass
class Break:
	end_time: float = 0.0


@dataclass
class Event:
	# raw token, "0" and "Background" are both kept as written
	event_type: str
	start_time: float
	params: object

	def timestamp(self):
		return self.start_time


@dataclass
class Beatmap:
	version: int = 14
	general: dict = None
	editor: dict = None
	metadata: dict = None
	difficulty: dict = None
	events: list = field(default_factory=list)
	timing_points: list = field(default_factory=list)
	colours: Colours = None
	hit_objects: list = field(default_factory=list)

	def key_count(self):
		return max(1, int(round(self.difficulty["CircleSize"])))
