#!/usr/bin/env python3

"""
Textual dashboard for stackcut exports.

Loads a timeline snapshot, compiles it on a worker thread, and shows the
merged segment plan with the highlighted ffmpeg command. Nothing is run.
"""

# Standard Library
import argparse
import os
import re
import shlex
import sys
import threading
import time
import traceback

script_dir = os.path.dirname(os.path.abspath(__file__))
repo_root = script_dir
if repo_root not in sys.path:
	sys.path.insert(0, repo_root)

# PIP3 modules
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import RichLog, Static
from rich.text import Text

# local repo modules
from stackcutlib.core.project import StackcutProject
from stackcutlib.core import utils
from stackcutlib.export import settings as export_settings

#============================================

NORD_COLORS = {
	'background': "#2E3440",
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'command': "#ECEFF4",
	'flags': "#81A1C1",
	'numbers': "#B48EAD",
	'paths': "#A3BE8C",
	'strings': "#EBCB8B",
	'warning': "#D08770",
	'error': "#BF616A",
}

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="stackcut export dashboard")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='timeline snapshot yaml file')
	parser.add_argument('-o', '--output', dest='output_file',
		help='override output file from yaml')
	parser.add_argument('-P', '--preset', dest='preset',
		help='export preset id, overrides the yaml export.preset')
	parser.add_argument('-d', '--debug', dest='debug_log', action='store_true',
		help='write debug log to stackcut_tui.log in the current directory')
	args = parser.parse_args()
	return args

#============================================

class StackcutTuiApp(App):
	BINDINGS = [
		("q", "quit", "Quit"),
	]

	CSS = """
	#root {
		height: 1fr;
	}

	#top_row {
		height: 30%;
		min-height: 8;
	}

	#left_panel {
		width: 40%;
		height: 1fr;
		border: solid gray;
	}

	#right_panel {
		width: 60%;
		height: 1fr;
		border: solid gray;
	}

	#summary_title {
		height: 1;
		color: #88C0D0;
	}

	#summary {
		height: 1fr;
	}

	#project_title {
		height: 1;
		color: #88C0D0;
	}

	#project_info {
		height: 1fr;
	}

	#footer_note {
		height: 1;
		color: #4C566A;
	}

	#log {
		height: 1fr;
		border: solid gray;
	}
	"""

	def __init__(self, yaml_file: str, output_override: str = None,
		preset: str = None, debug_log: bool = False):
		super().__init__()
		self.yaml_file = yaml_file
		self.output_override = output_override
		self.preset = preset
		self.start_time = None
		self.finish_time = None
		self.error_text = None
		self.result = None
		self.project = None
		self.summary_widget = None
		self.project_widget = None
		self.log_widget = None
		self.finished = False
		self.command_styles = self._build_command_styles()
		self.debug_mode = debug_log
		self.log_path = None
		self.log_lock = threading.Lock()
		if self.debug_mode:
			self.log_path = os.path.join(os.getcwd(), "stackcut_tui.log")
			self._reset_log()
			self._write_log(f"debug log: {self.log_path}")

	#============================
	def compose(self) -> ComposeResult:
		yield Static("STACKCUT", id="header")
		with Vertical(id="root"):
			with Horizontal(id="top_row"):
				with Vertical(id="left_panel"):
					yield Static("Export", id="summary_title")
					yield Static("", id="summary")
					yield Static("Press q to quit", id="footer_note")
				with Vertical(id="right_panel"):
					yield Static("Project", id="project_title")
					yield Static("", id="project_info")
			yield RichLog(id="log", wrap=True, highlight=False)

	#============================
	def on_mount(self) -> None:
		self.summary_widget = self.query_one("#summary", Static)
		self.project_widget = self.query_one("#project_info", Static)
		self.log_widget = self.query_one(RichLog)
		self.start_time = time.time()
		self._update_project_info()
		self._update_summary()
		if self.debug_mode and self.log_widget is not None and self.log_path is not None:
			self.log_widget.write(f"debug log: {self.log_path}")
		thread = threading.Thread(target=self._compile_project, daemon=True)
		thread.start()

	#============================
	def _compile_project(self) -> None:
		utils.set_quiet_mode(True)
		try:
			project = StackcutProject(self.yaml_file,
				output_override=self.output_override,
				preset=self.preset)
			self._write_log(f"loaded: {self.yaml_file}")
			result = project.compile()
			self.call_from_thread(self._set_result, project, result)
		except Exception as exc:
			self.call_from_thread(self._set_error, str(exc), traceback.format_exc())
		finally:
			utils.set_quiet_mode(False)
			self.call_from_thread(self._finish)

	#============================
	def _set_result(self, project, result) -> None:
		self.project = project
		self.result = result
		self._update_project_info()
		if self.log_widget is None:
			return
		if result is None:
			self.log_widget.write(Text("nothing to export", style=NORD_COLORS['warning']))
			self._write_log("nothing to export")
			return
		self.log_widget.write(Text("Segments", style=f"bold {NORD_COLORS['header']}"))
		for index, segment in enumerate(result.segments):
			line = self._format_segment_line(index, segment)
			self.log_widget.write(line)
			self._write_log(line)
		if result.export_audio_warning:
			self.log_widget.write(Text(
				"warning: audio presence is unknown for some media",
				style=NORD_COLORS['warning']))
		self.log_widget.write("")
		self.log_widget.write(Text(self._summarize_command(result.command),
			style=f"bold {NORD_COLORS['header']}"))
		self.log_widget.write(self._highlight_command(result.command))
		self._write_log(f"command: {result.command}")

	#============================
	def _set_error(self, text: str, trace_text: str = None) -> None:
		self.error_text = text
		if trace_text:
			self._write_log(trace_text)
		if self.log_widget is not None:
			self.log_widget.write(
				Text(f"error: {text}", style=f"bold {NORD_COLORS['error']}")
			)

	#============================
	def _finish(self) -> None:
		if self.log_widget is None or self.summary_widget is None:
			return
		self.finished = True
		if self.start_time is not None and self.finish_time is None:
			self.finish_time = time.time() - self.start_time
		if self.error_text is None:
			self._write_log("complete")
		else:
			self.log_widget.write("complete with errors")
			self._write_log("complete with errors")
		self._update_summary()

	#============================
	def _write_log(self, message: str) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		elapsed = 0.0
		if self.start_time is not None:
			elapsed = time.time() - self.start_time
		# continuation lines of a traceback align under the first line
		lines = str(message).splitlines() or [""]
		text = f"[+{elapsed:8.3f}s] {lines[0]}\n"
		for extra in lines[1:]:
			text += f"{'':13s}{extra}\n"
		with self.log_lock:
			with open(self.log_path, "a", encoding="utf-8") as handle:
				handle.write(text)

	#============================
	def _reset_log(self) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		started = time.strftime("%Y-%m-%d %H:%M:%S")
		with self.log_lock:
			with open(self.log_path, "w", encoding="utf-8") as handle:
				handle.write(f"stackcut_tui {started} yaml={self.yaml_file}\n")

	#============================
	def _format_segment_line(self, index: int, segment) -> str:
		video = ', '.join(clip.id for clip in segment.video_clips) or 'black'
		audio = ', '.join(clip.id for clip in segment.audio_clips) or 'silence'
		start = utils.format_timecode(segment.start)
		end = utils.format_timecode(segment.end)
		return f"{index:3d}  {start} - {end}  video: {video}  audio: {audio}"

	#============================
	def _summarize_command(self, command: str) -> str:
		if command is None or command == "":
			return "command"
		try:
			parts = shlex.split(command)
		except ValueError:
			return command
		if len(parts) == 0:
			return command
		tool = 'ffmpeg'
		if parts[0] == 'printf':
			tool = 'ffmpeg concat copy'
		output_file = os.path.basename(parts[-1])
		return f"{tool}: {output_file}"

	#============================
	def _update_summary(self) -> None:
		if self.summary_widget is None:
			return
		if self.error_text is not None:
			status = "failed"
		elif self.finished:
			status = "done"
		else:
			status = "compiling"
		summary = Text()
		status_style = NORD_COLORS['foreground']
		if status == "failed":
			status_style = NORD_COLORS['error']
		elif status == "done":
			status_style = NORD_COLORS['paths']
		summary.append("Status: ", style=NORD_COLORS['dim'])
		summary.append(status, style=status_style)
		summary.append("\n")
		summary.append("Compile time: ", style=NORD_COLORS['dim'])
		summary.append(self._format_compile_time(self.finish_time or 0.0),
			style=NORD_COLORS['numbers'])
		summary.append("\n")
		result = self.result
		summary.append("Segments: ", style=NORD_COLORS['dim'])
		if result is None:
			summary.append("N/A", style=NORD_COLORS['dim'])
		else:
			summary.append(f"{len(result.segments)}", style=NORD_COLORS['numbers'])
			summary.append("\n")
			summary.append("Mode: ", style=NORD_COLORS['dim'])
			mode = "stream copy" if result.used_lossless_copy else "filter graph"
			summary.append(mode, style=NORD_COLORS['foreground'])
			summary.append("\n")
			summary.append("Frame: ", style=NORD_COLORS['dim'])
			summary.append(f"{result.width}x{result.height}",
				style=NORD_COLORS['numbers'])
			if result.merge_blocked_by_other_tracks:
				summary.append("\n")
				summary.append("merge blocked by other tracks",
					style=NORD_COLORS['warning'])
		self.summary_widget.update(summary)

	#============================
	def _update_project_info(self) -> None:
		if self.project_widget is None:
			return
		project = Text()
		project.append("YAML: ", style=NORD_COLORS['dim'])
		project.append(self.yaml_file, style=NORD_COLORS['paths'])
		project.append("\n")
		output_value = self.output_override or "N/A"
		preset_value = self.preset or "N/A"
		if self.project is not None:
			output_value = self.project.settings.output_name
			preset_value = export_settings.match_preset(self.project.settings) or "custom"
		project.append("Output: ", style=NORD_COLORS['dim'])
		output_style = NORD_COLORS['paths']
		if output_value == "N/A":
			output_style = NORD_COLORS['dim']
		project.append(output_value, style=output_style)
		project.append("\n")
		project.append("Preset: ", style=NORD_COLORS['dim'])
		project.append(preset_value, style=NORD_COLORS['foreground'])
		if self.project is not None:
			snapshot = self.project.snapshot
			project.append("\n")
			project.append("Clips: ", style=NORD_COLORS['dim'])
			project.append(f"{len(snapshot.clips)}", style=NORD_COLORS['numbers'])
			project.append(" | Media: ", style=NORD_COLORS['dim'])
			project.append(f"{len(snapshot.media)}", style=NORD_COLORS['numbers'])
			project.append("\n")
			project.append("De-click: ", style=NORD_COLORS['dim'])
			project.append("yes" if snapshot.export_settings.de_click else "no",
				style=NORD_COLORS['foreground'])
		if self.debug_mode and self.log_path is not None:
			project.append("\n")
			project.append("Debug log: ", style=NORD_COLORS['dim'])
			project.append(self.log_path, style=NORD_COLORS['paths'])
		self.project_widget.update(project)

	#============================
	def _build_command_styles(self) -> list:
		return [
			(re.compile(r"\blibx265\b|\blibx264\b|\baac\b|\bcopy\b"),
				NORD_COLORS['foreground']),
			(re.compile(r"(?<![\w:])--?[A-Za-z][A-Za-z0-9_:-]*"), NORD_COLORS['flags']),
			(re.compile(r"\b\d+\.\d+\b"), NORD_COLORS['numbers']),
			(re.compile(r"\b\d+\b(?!\.\d)"), NORD_COLORS['numbers']),
			(re.compile(r"\[[A-Za-z0-9:]+\]"), NORD_COLORS['header']),
			(re.compile(r"'[^']*'|\"[^\"]*\""), NORD_COLORS['strings']),
		]

	#============================
	def _highlight_command(self, command: str):
		"""
		Style an export command; later patterns paint over earlier ones,
		so quoted filter graphs and paths end up in the string color.
		"""
		if not command:
			return ""
		text = Text(command, style=f"bold {NORD_COLORS['command']}")
		for pattern, style in self.command_styles:
			text.highlight_regex(pattern, style=style)
		return text

	#============================
	def _format_compile_time(self, seconds: float) -> str:
		milliseconds = seconds * 1000.0
		if milliseconds < 1000:
			return f"{milliseconds:.1f} ms"
		return f"{seconds:.2f} s"

#============================================

def main():
	args = parse_args()
	sys.argv = [arg for arg in sys.argv if arg not in ("-d", "--debug")]
	app = StackcutTuiApp(args.yamlfile,
		output_override=args.output_file,
		preset=args.preset,
		debug_log=args.debug_log)
	app.run()

#============================================

if __name__ == '__main__':
	main()
