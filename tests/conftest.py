"""
Shared fixtures for the osufile / transforms tests.
"""

import pytest

from osufile.osu_parser import parse


SAMPLE_MAP = """osu file format v14

[General]
AudioFilename: audio.mp3
AudioLeadIn: 0
PreviewTime: 61234
Countdown: 0
SampleSet: Soft
StackLeniency: 0.5
Mode: 0
LetterboxInBreaks: 0
WidescreenStoryboard: 1

[Editor]
Bookmarks: 1000,2500.5
DistanceSpacing: 1.2
BeatDivisor: 4
GridSize: 8
TimelineZoom: 1.7

[Metadata]
Title:Hitsound Test
TitleUnicode:Hitsound Test
Artist:Someone
ArtistUnicode:Someone
Creator:mapper
Version:Hard
Source:
Tags:test tags here
BeatmapID:123
BeatmapSetID:-1

[Difficulty]
HPDrainRate:5
CircleSize:4
OverallDifficulty:7
ApproachRate:8.5
SliderMultiplier:1.4
SliderTickRate:1

[Events]
//Background and Video events
0,0,"bg.jpg",0,0
//Break Periods
2,5000,8000
//Storyboard Layer 0 (Background)
Sprite,Foreground,Centre,"sb/star.png",320,240
 F,0,1000,2000,0,1

[TimingPoints]
0,500,4,2,0,50,1,0
1000,-50,4,2,0,60,0,0
4000,-100,4,2,0,60,0,1

[Colours]
Combo1 : 255,128,0
Combo2 : 0,202,0,200
SliderBorder : 10,10,10

[HitObjects]
256,192,0,5,0,0:0:0:0:
100,100,500,2,2,B|200:100|200:200,2,140,2|0|8,1:2|0:0|2:0,0:0:0:0:
256,192,2000,12,0,3000,0:0:0:0:
300,100,3500,1,4,1:0:3:70:clap.wav
"""

END_TO_END_MAP = (
	"osu file format v14\n\n[Difficulty]\nSliderMultiplier: 1.4\n\n"
	"[TimingPoints]\n0,500,4,2,0,50,1,0\n\n[HitObjects]\n256,192,0,1,0,0:0:0:0:\n")


@pytest.fixture
def sample_text():
	return SAMPLE_MAP

@pytest.fixture
def sample_map():
	return parse(SAMPLE_MAP)

@pytest.fixture
def end_to_end_text():
	return END_TO_END_MAP
