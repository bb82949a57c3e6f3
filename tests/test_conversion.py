import pytest

from osufile.beatmap import CurveType, HitCircle, Hold, SampleBank
from osufile.osu_errors import ConversionError
from osufile.osu_parser import parse
from osufile.osu_serializer import to_string
from transforms.conversion_module import (
	beatmap_file_name, lazer_to_stable, mania_column_position, std_to_mania)


LAZER_MAP = (
	"osu file format v128\n"
	"[TimingPoints]\n10.7,500,4,1,0,100,1,0\n"
	"[HitObjects]\n"
	"100,100,20.9,2,0,L|200:100|200:200|100:200,1,300\n"
	"0,0,40.5,1,0\n"
	"50,50,60,2,0,P|100:100|150:50,1,120\n")


def test_mania_column_position():
	assert mania_column_position(0, 4) == (64, 192)
	assert mania_column_position(3, 4) == (448, 192)
	assert mania_column_position(2, 7) == (182, 192)


def test_lazer_to_stable():
	bm = parse(LAZER_MAP)

	lazer_to_stable(bm)

	assert bm.version == 14
	assert bm.timing_points[0].time == 10
	assert [h.time for h in bm.hit_objects] == [20, 40, 60]

	slider = bm.hit_objects[0].params
	assert slider.first_curve_type == CurveType.BEZIER
	assert all(p.curve_type == CurveType.INHERIT for p in slider.curve_points)
	assert [(p.x, p.y) for p in slider.curve_points] == [(200, 100), (200, 100), (200, 200), (200, 200), (100, 200)]


def test_lazer_to_stable_keeps_three_point_arcs():
	bm = parse(LAZER_MAP)

	lazer_to_stable(bm)

	arc = bm.hit_objects[2].params
	assert arc.first_curve_type == CurveType.PERFECT_CURVE
	assert [(p.x, p.y) for p in arc.curve_points] == [(100, 100), (150, 50)]


def test_lazer_to_stable_output_is_legacy():
	bm = parse(LAZER_MAP)

	lazer_to_stable(bm)
	text = to_string(bm)

	assert text.startswith("osu file format v14\n")
	assert "100,100,20,2,0,B|200:100|200:100|200:200|200:200|100:200,1,300" in text
	assert parse(text) == bm


def test_std_to_mania(sample_map):
	file_name = std_to_mania(sample_map)

	assert file_name == "Someone - Hitsound Test (mapper) [Hard - mania].osu"
	assert sample_map.general["Mode"] == 3
	assert sample_map.difficulty["CircleSize"] == 4
	assert sample_map.metadata["Version"] == "Hard - mania"

	hit_objects = sample_map.hit_objects
	assert [h.time for h in hit_objects] == [0, 500, 500, 1000, 1500, 2000, 3500]
	assert [h.x for h in hit_objects] == [64, 192, 320, 320, 320, 448, 64]
	assert all(h.y == 192 for h in hit_objects)


def test_std_to_mania_slider_becomes_hold_and_edge_notes(sample_map):
	std_to_mania(sample_map)

	hold = sample_map.hit_objects[1]
	assert isinstance(hold.params, Hold)
	# 140 px at 1.4x multiplier and 500 ms beats is one beat per slide
	assert hold.params.end_time == pytest.approx(1500)

	edges = [h for h in sample_map.hit_objects if h.x == 320]
	assert all(isinstance(h.params, HitCircle) for h in edges)
	assert [h.hit_sound for h in edges] == [2, 0, 8]
	assert [(h.hit_sample.normal_set, h.hit_sample.addition_set) for h in edges] == [
		(SampleBank.NORMAL, SampleBank.SOFT),
		(SampleBank.AUTO, SampleBank.AUTO),
		(SampleBank.SOFT, SampleBank.AUTO)]


def test_std_to_mania_spinner_becomes_hold(sample_map):
	std_to_mania(sample_map)

	spinner = sample_map.hit_objects[5]
	assert spinner.params == Hold(3000)


def test_std_to_mania_serializes_holds(sample_map):
	std_to_mania(sample_map)
	text = to_string(sample_map)

	assert "448,192,2000,128,0,3000:0:0:0:0:" in text
	assert parse(text) == sample_map


def test_std_to_mania_rejects_other_modes(sample_map):
	sample_map.general["Mode"] = 3

	with pytest.raises(ConversionError):
		std_to_mania(sample_map)

	assert sample_map.metadata["Version"] == "Hard"


def test_std_to_mania_needs_metadata():
	bm = parse("osu file format v14\n[General]\nMode: 0\n[Difficulty]\nCircleSize: 4\n")

	with pytest.raises(ConversionError):
		std_to_mania(bm)


def test_file_name_is_sanitized(sample_map):
	sample_map.metadata["Title"] = 'a/b:c?'
	sample_map.metadata["Version"] = "<Insane>"

	assert beatmap_file_name(sample_map) == "Someone - a_b_c_ (mapper) [_Insane_].osu"
