#!/usr/bin/env python3

import math

#============================================

QUIET_MODE = False

#============================================

def set_quiet_mode(enabled: bool) -> None:
	global QUIET_MODE
	QUIET_MODE = bool(enabled)

#============================================

def is_quiet_mode() -> bool:
	return QUIET_MODE

#============================================

def format_fixed(value: float, places: int = 3) -> str:
	"""
	Format a number with fixed precision, then strip trailing zeros
	and a trailing decimal point, so 1.500 becomes 1.5 and 2.000 becomes 2.
	"""
	text = f"{value:.{places}f}"
	if '.' in text:
		text = text.rstrip('0').rstrip('.')
	if text == '-0':
		text = '0'
	return text

#============================================

def format_seconds(milliseconds: float) -> str:
	return format_fixed(milliseconds / 1000.0, 3)

#============================================

def format_number(value) -> str:
	"""
	Shortest text for a filter parameter: integral values print without
	a decimal point, everything else uses the shortest round-trip form.
	"""
	if isinstance(value, bool):
		return str(int(value))
	number = float(value)
	if math.isfinite(number) and number.is_integer():
		return str(int(number))
	return repr(number)

#============================================

def escape_shell_arg(value: str) -> str:
	# double-quoted arguments only need embedded quotes escaped
	return str(value).replace('"', '\\"')

#============================================

def escape_concat_file_path(value: str) -> str:
	return str(value).replace('\\', '\\\\').replace("'", "\\'")

#============================================

def escape_for_single_quotes(value: str) -> str:
	return str(value).replace("'", "'\\''")

#============================================

def is_close_time(first: float, second: float, epsilon: float = 0.5) -> bool:
	return abs(first - second) <= epsilon

#============================================

def format_timecode(milliseconds: float) -> str:
	"""
	Format milliseconds as M:SS.cc for plan dumps and the dashboard.
	"""
	total_seconds = int(milliseconds // 1000)
	minutes = total_seconds // 60
	seconds = total_seconds % 60
	centis = int((milliseconds % 1000) // 10)
	return f"{minutes}:{seconds:02d}.{centis:02d}"
