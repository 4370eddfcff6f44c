"""YAML settings for a digest run.

The settings path given on the command line is taken relative to the
working directory. A missing file means defaults for everything. Keys
read here:

	github:
	  token: <optional API token, GITHUB_TOKEN env otherwise>
	digest:
	  page_ceiling: <int >= 1, default 5>
	  timezone: <IANA zone for business-day windows, TZ env otherwise, UTC last>
"""

# Standard Library
import os
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

import yaml


DEFAULT_PAGE_CEILING = 5
DEFAULT_TIMEZONE = "UTC"


#============================================
def load_settings(path_text: str) -> tuple[dict, str]:
	"""
	Read the settings file into a mapping; returns it with the absolute path.
	"""
	resolved_path = os.path.abspath(os.path.expanduser(path_text))
	if not os.path.isfile(resolved_path):
		return {}, resolved_path
	with open(resolved_path, "r", encoding="utf-8") as handle:
		try:
			data = yaml.safe_load(handle)
		except yaml.YAMLError as error:
			raise RuntimeError(f"Settings file is not valid YAML: {resolved_path}: {error}") from error
	if data is None:
		return {}, resolved_path
	if not isinstance(data, dict):
		raise RuntimeError(f"Settings file must contain a mapping: {resolved_path}")
	return data, resolved_path


#============================================
def _section_value(settings: dict, section: str, key: str):
	"""
	Return settings[section][key], or None when either level is absent.
	"""
	block = settings.get(section)
	if block is None:
		return None
	if not isinstance(block, dict):
		raise RuntimeError(f"Settings section '{section}' must be a mapping")
	return block.get(key)


#============================================
def get_github_token(settings: dict) -> str:
	"""
	Resolve optional GitHub token, preferring settings over GITHUB_TOKEN env.
	"""
	value = _section_value(settings, "github", "token")
	if value is not None and str(value).strip():
		return str(value).strip()
	return (os.environ.get("GITHUB_TOKEN", "") or "").strip()


#============================================
def get_page_ceiling(settings: dict) -> int:
	"""
	Read digest.page_ceiling; it must be a whole number of at least one page.
	"""
	value = _section_value(settings, "digest", "page_ceiling")
	if value is None:
		return DEFAULT_PAGE_CEILING
	# bool is an int subclass; "true" is not a page count
	if isinstance(value, bool):
		raise RuntimeError(f"digest.page_ceiling must be an integer; got {value!r}")
	try:
		ceiling = int(value)
	except (TypeError, ValueError) as error:
		raise RuntimeError(f"digest.page_ceiling must be an integer; got {value!r}") from error
	if ceiling < 1:
		raise RuntimeError(f"digest.page_ceiling must be >= 1; got {ceiling}")
	return ceiling


#============================================
def get_timezone(settings: dict) -> ZoneInfo:
	"""
	Resolve the zone that business-day windows are cut in.
	"""
	value = _section_value(settings, "digest", "timezone")
	name = str(value).strip() if value is not None else ""
	if not name:
		name = (os.environ.get("TZ", "") or "").strip() or DEFAULT_TIMEZONE
	try:
		return ZoneInfo(name)
	except (ZoneInfoNotFoundError, ValueError) as error:
		raise RuntimeError(f"Unknown timezone for business-day windows: {name!r}") from error
