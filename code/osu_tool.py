import os
import glob
import shutil
import logging
import argparse

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from osufile.beatmap import (
	CurveType, HITSOUND_CLAP, HITSOUND_FINISH, HITSOUND_NORMAL, HITSOUND_WHISTLE,
	SampleBank, Slider)
from osufile.osu_errors import OsuError
from osufile.osu_parser import OsuParser
from osufile.osu_serializer import OsuSerializer
from transforms.conversion_module import beatmap_file_name, lazer_to_stable, std_to_mania
from transforms.hitsound_module import splat_hitsounds
from transforms.timing_module import cleanup_timing_points, mix_volume, offset_map, reset_hitsounds

logger = logging.getLogger("osu_tool")

PATH_HELP = "path to a .osu file or a folder containing .osu files"
OSU_HEADER = b"osu file format v"
UTF8_BOM = b"\xef\xbb\xbf"

sample_banks = {
	"auto" : SampleBank.AUTO,
	"normal" : SampleBank.NORMAL,
	"soft" : SampleBank.SOFT,
	"drum" : SampleBank.DRUM
}


def find_maps(path):
	if os.path.isdir(path):
		return sorted(glob.glob(os.path.join(path, "**/*.osu"), recursive=True))
	return [path]

def backup(path):
	"""Copies `path` next to itself as `<name>.osu.backup`, numbering the copy when that name is taken."""
	root = os.path.splitext(path)[0]
	out_path = root + ".osu.backup"
	n = 1
	while os.path.exists(out_path):
		out_path = root + ".osu." + str(n) + ".backup"
		n += 1
	logger.info(f"Backing up {path} to {out_path}")
	shutil.copyfile(path, out_path)
	return out_path

def rewrite_maps(path, transform, keep_backup=True):
	"""Applies `transform(bm, map_path)` to every map under `path` and writes it back.

	`transform` may return another path to write the map to instead.
	Returns the number of maps that failed.
	"""
	parser = OsuParser()
	serializer = OsuSerializer()
	failed = 0
	files = find_maps(path)
	with logging_redirect_tqdm():
		for map_path in tqdm(files, disable=len(files) < 2):
			try:
				bm = parser.parse_map(map_path)
				out_path = transform(bm, map_path) or map_path
				if keep_backup and out_path == map_path:
					backup(map_path)
				serializer.serialize_beatmap(bm, out_path)
			except (OsuError, OSError) as e:
				logger.error(f"{map_path}: {e}")
				failed += 1
	return failed


def is_osu_file(path):
	"""True when the first line of `path` is an `osu file format` header."""
	with open(path, 'rb') as f:
		first_line = f.readline(64)
	return first_line.startswith(OSU_HEADER) or first_line.startswith(UTF8_BOM + OSU_HEADER)

def find_files(path, recursive=False):
	if not os.path.isdir(path):
		return [path]
	pattern = os.path.join(path, "**", "*") if recursive else os.path.join(path, "*")
	return sorted(x for x in glob.glob(pattern, recursive=recursive) if os.path.isfile(x))

def extracted_name(parser, path):
	# lazer stores files under their hash, without extension
	hashed_name = os.path.splitext(os.path.basename(path))[0] + ".osu"
	try:
		bm = parser.parse_map(path)
	except OsuError as e:
		logger.warning(f"{path}: {e}, keeping its hashed name")
		return hashed_name
	if bm.metadata is None:
		return hashed_name
	return beatmap_file_name(bm)

def extract_lazer_files(path, out_path, recursive=False):
	"""Copies every .osu file found under `path` to `out_path`, named after its metadata.

	Returns the number of copied maps.
	"""
	os.makedirs(out_path, exist_ok=True)
	parser = OsuParser()
	copied = 0
	files = find_files(path, recursive)
	with logging_redirect_tqdm():
		for file_path in tqdm(files, disable=len(files) < 2):
			if not is_osu_file(file_path):
				continue
			out_file = os.path.join(out_path, extracted_name(parser, file_path))
			logger.info(f"Map in {file_path}, copying it to {out_file}")
			shutil.copyfile(file_path, out_file)
			copied += 1
	return copied

def run_extract_osu_lazer_files(args):
	try:
		copied = extract_lazer_files(args.path, args.out_path, args.recursive)
	except OSError as e:
		logger.error(f"{args.path}: {e}")
		return 1
	logger.info(f"Extracted {copied} maps to {args.out_path}")
	return 0


def run_offset(args):
	def transform(bm, map_path):
		offset_map(bm, args.millis)
	return rewrite_maps(args.path, transform)

def run_mix_volume(args):
	def transform(bm, map_path):
		mix_volume(bm.timing_points, args.val)
	return rewrite_maps(args.path, transform)

def run_reset_sample_sets(args):
	def transform(bm, map_path):
		reset_hitsounds(bm.timing_points, sample_banks[args.sample])
		if args.cleanup:
			cleanup_timing_points(bm)
	return rewrite_maps(args.path, transform)

def run_cleanup_timing_points(args):
	def transform(bm, map_path):
		cleanup_timing_points(bm)
	return rewrite_maps(args.path, transform)

def run_splat_hitsounds(args):
	try:
		soundmap = OsuParser().parse_map(args.sound_map)
	except OsuError as e:
		logger.error(f"{args.sound_map}: {e}")
		return 1

	def transform(bm, map_path):
		splat_hitsounds(bm, soundmap, mania=args.mania)
	return rewrite_maps(args.path, transform)

def run_lazer_to_stable(args):
	def transform(bm, map_path):
		lazer_to_stable(bm)
	return rewrite_maps(args.path, transform)

def run_std_to_mania(args):
	def transform(bm, map_path):
		file_name = std_to_mania(bm)
		return os.path.join(os.path.dirname(map_path), file_name)
	return rewrite_maps(args.path, transform)


def _hitsound_flags(hit_sound):
	flags = [(HITSOUND_NORMAL, 'N'), (HITSOUND_WHISTLE, 'W'), (HITSOUND_FINISH, 'F'), (HITSOUND_CLAP, 'C')]
	return ''.join(letter if hit_sound & flag else '-' for flag, letter in flags)

def _curve_letter(curve_type):
	return curve_type.value if curve_type != CurveType.INHERIT else 'I'

def describe_slider(hit_object):
	slider = hit_object.params
	lines = [f"Slider ({len(slider.curve_points) + 1} pts, {slider.slides} slides, len = {slider.length})"]
	lines.append("{")
	lines.append("  Path")
	lines.append("  {")
	lines.append(f"    {_curve_letter(slider.first_curve_type)} | {hit_object.x:03}:{hit_object.y:03}")
	for point in slider.curve_points:
		lines.append(f"    {_curve_letter(point.curve_type)} | {point.x:03}:{point.y:03}")
	lines.append("  }")
	lines.append("  Hitsounds")
	lines.append("  {")
	sample = hit_object.hit_sample
	lines.append(f"    {_hitsound_flags(hit_object.hit_sound)} {sample.normal_set.name.title()}:{sample.addition_set.name.title()}")
	for hit_sound, sample_set in zip(slider.edge_hitsounds, slider.edge_samplesets):
		lines.append(f"    {_hitsound_flags(hit_sound)} {sample_set.normal_set.name.title()}:{sample_set.addition_set.name.title()}")
	lines.append("  }")
	lines.append("}")
	return '\n'.join(lines)

def run_debug_slider(args):
	try:
		hit_object = OsuParser().parse_hit_object(args.slider)
	except OsuError as e:
		logger.error(f"Could not parse the hit object: {e}")
		return 1
	if not isinstance(hit_object.params, Slider):
		logger.error("The provided object is not a slider")
		return 1
	print(describe_slider(hit_object))
	return 0


def build_parser():
	parser = argparse.ArgumentParser(
		prog="osu-tool",
		description="Batch edit .osu beatmap files. Every rewritten map is backed up first.")
	parser.add_argument(
		"-v", "--verbose", action="store_true",
		help="log every step, not only progress and errors")
	subparsers = parser.add_subparsers(dest="command", required=True)

	extract = subparsers.add_parser(
		"extract-osu-lazer-files", help="extract every .osu file from the hashed osu!lazer file store")
	extract.add_argument(
		"-o", "--out-path", default="maps",
		help="folder where the beatmaps are copied, defaults to ./maps/")
	extract.add_argument(
		"-r", "--recursive", action="store_true",
		help="look into sub-folders too, ignored when the path is a file")
	extract.add_argument("path", help="path to a lazer file or to a folder of lazer files")
	extract.set_defaults(func=run_extract_osu_lazer_files)

	offset = subparsers.add_parser("offset", help="offset the whole beatmap by some amount of milliseconds")
	offset.add_argument("millis", type=float, help="milliseconds to offset the beatmap by, can be a decimal number")
	offset.add_argument("path", help=PATH_HELP)
	offset.set_defaults(func=run_offset)

	volume = subparsers.add_parser("mix-volume", help="raise or lower the volume of every timing point")
	volume.add_argument("--val", type=int, required=True, help="amount of volume to add, can be negative")
	volume.add_argument("path", help=PATH_HELP)
	volume.set_defaults(func=run_mix_volume)

	reset = subparsers.add_parser(
		"reset-sample-sets",
		help="reset every timing point to the same sample set, hit object samples are left untouched")
	reset.add_argument(
		"--sample", choices=list(sample_banks), default="auto",
		help="the sample set written to every timing point")
	reset.add_argument(
		"--no-cleanup", dest="cleanup", action="store_false",
		help="keep duplicate and useless timing points afterwards")
	reset.add_argument("path", help=PATH_HELP)
	reset.set_defaults(func=run_reset_sample_sets)

	cleanup = subparsers.add_parser(
		"cleanup-timing-points", help="remove duplicate timing points and useless speed changes")
	cleanup.add_argument("path", help=PATH_HELP)
	cleanup.set_defaults(func=run_cleanup_timing_points)

	splat = subparsers.add_parser("splat-hitsounds", help="take the hitsounds of a map and splat them on another")
	splat.add_argument("-s", "--sound-map", required=True, help="path of the map holding the hitsounds")
	splat.add_argument(
		"-m", "--mania", action="store_true",
		help="spread the hitsounds of each row of notes across its notes")
	splat.add_argument("path", help=PATH_HELP)
	splat.set_defaults(func=run_splat_hitsounds)

	stable = subparsers.add_parser("lazer-to-stable", help="convert a lazer map (v128) to a stable map (v14)")
	stable.add_argument("path", help=PATH_HELP)
	stable.set_defaults(func=run_lazer_to_stable)

	mania = subparsers.add_parser(
		"std-to-mania",
		help="convert a std map to 4K mania, written next to the original")
	mania.add_argument("path", help=PATH_HELP)
	mania.set_defaults(func=run_std_to_mania)

	debug = subparsers.add_parser("debug-slider", help="print a slider hit object line in a readable form")
	debug.add_argument("slider", help="a [HitObjects] line holding a slider")
	debug.set_defaults(func=run_debug_slider)
	return parser

def main(argv=None):
	args = build_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format="%(levelname)s %(name)s: %(message)s")
	return 1 if args.func(args) else 0


if __name__ == "__main__":
	raise SystemExit(main())
