#!/usr/bin/env python3

import argparse
import sys
import yaml
from stackcutlib.core import utils
from stackcutlib.core.project import StackcutProject

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Timeline to ffmpeg command compiler")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='timeline snapshot yaml file')
	parser.add_argument('-o', '--output', dest='output_file',
		help='override output file from yaml')
	parser.add_argument('-P', '--preset', dest='preset',
		help='export preset id, overrides the yaml export.preset')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the merged segment plan instead of the command')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='print only the command')
	args = parser.parse_args(argv)
	return args

#============================================

def main(argv: list = None) -> int:
	args = parse_args(argv)
	utils.set_quiet_mode(args.quiet)
	project = StackcutProject(args.yamlfile, output_override=args.output_file,
		preset=args.preset)
	if args.dump_plan:
		print(yaml.safe_dump(project.plan(), sort_keys=False))
		return 0
	if not project.run():
		return 1
	return 0


if __name__ == '__main__':
	sys.exit(main())
