#!/usr/bin/env python3

"""
Compile a timeline snapshot into a single ffmpeg command.

The pipeline is pure: resolve the topmost clip per channel, clip the
result to the export range, merge continuous neighbours, then either
emit a stream-copy concat command or a full filter graph.
"""

from stackcutlib.core import filters
from stackcutlib.core import merger
from stackcutlib.core import model
from stackcutlib.core import resolver
from stackcutlib.export import ffmpeg_command
from stackcutlib.export import ffmpeg_copy
from stackcutlib.export import ffmpeg_graph

#============================================

def plan_segments(snapshot: model.TimelineSnapshot, media_info: dict = None,
	resolve=None):
	"""
	Return a MergeResult for the export range, or None when the range is
	empty or inverted.
	"""
	if media_info is None:
		media_info = snapshot.media_info
	settings = snapshot.export_settings
	media_by_id = snapshot.media_by_id()
	segments = resolver.SegmentResolver(snapshot.clips, media_by_id,
		media_info).resolve()
	export_range = merger.normalize_range(settings.range_start, settings.range_end)
	if export_range is None:
		return None
	(range_start, range_end) = export_range
	segments = merger.clip_to_range(segments, range_start, range_end)
	segment_merger = merger.SegmentMerger(snapshot.default_filters, resolve)
	return segment_merger.merge(segments)

#============================================

def compile_export(snapshot: model.TimelineSnapshot, media_info: dict = None,
	resolve=None):
	"""
	Build the export command for a timeline snapshot.

	Args:
		snapshot: clips, tracks, media, and export settings.
		media_info: per-media stream presence, defaults to the snapshot's.
		resolve: optional clip filter resolver, defaults to
			filters.resolve_filters.

	Returns:
		ExportResult, or None when there is nothing to export.
	"""
	if len(snapshot.clips) == 0:
		return None
	if media_info is None:
		media_info = snapshot.media_info
	resolve = resolve or filters.resolve_filters
	settings = snapshot.export_settings
	defaults = snapshot.default_filters
	media_by_id = snapshot.media_by_id()

	merge_result = plan_segments(snapshot, media_info, resolve)
	if merge_result is None or len(merge_result.segments) == 0:
		return None
	segments = merge_result.segments
	assembler = ffmpeg_command.CommandAssembler(settings)

	if settings.allow_lossless_copy and not settings.de_click:
		planner = ffmpeg_copy.LosslessCopyPlanner(segments, media_by_id,
			media_info, defaults, resolve)
		copy_plan = planner.plan()
		if copy_plan is not None:
			media = copy_plan.media
			return ffmpeg_command.ExportResult(
				assembler.copy_command(copy_plan),
				export_audio_warning=copy_plan.export_audio_warning,
				used_lossless_copy=True,
				merge_blocked_by_other_tracks=merge_result.merge_blocked_by_other_tracks,
				segments=segments,
				inputs=[media],
				width=int(media.width or 0),
				height=int(media.height or 0),
			)

	(width, height) = ffmpeg_command.resolve_output_resolution(settings,
		snapshot.clips, media_by_id)
	synthesizer = ffmpeg_graph.FilterGraphSynthesizer(segments, media_by_id,
		media_info, settings, defaults, width, height, resolve)
	graph_plan = synthesizer.build()
	if graph_plan is None:
		return None
	return ffmpeg_command.ExportResult(
		assembler.filter_command(graph_plan),
		export_audio_warning=graph_plan.export_audio_warning,
		used_lossless_copy=False,
		merge_blocked_by_other_tracks=merge_result.merge_blocked_by_other_tracks,
		segments=segments,
		inputs=graph_plan.inputs,
		width=width,
		height=height,
	)
