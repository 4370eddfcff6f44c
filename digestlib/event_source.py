"""Event sources feeding the window fetch loop.

Both sources answer fetch(user, page) with raw feed records, newest
first, and expose the index of their first page. A static capture has
no real pages: everything comes back on the first page.
"""

# Standard Library
import json
import os

# local repo modules
from digestlib import github_client


FIRST_PAGE = 1


#============================================
class CaptureFormatError(RuntimeError):
	"""
	Raised when a captured events file cannot be read as a record list.
	"""


#============================================
class LiveEventSource:
	"""
	Page through the public events feed with a GitHubClient.
	"""

	first_page = FIRST_PAGE

	def __init__(self, client: github_client.GitHubClient):
		self.client = client
		self.fetched_records: list[dict] = []

	#============================================
	def fetch(self, user: str, page: int) -> list[dict]:
		records = self.client.list_public_events_page(user, page)
		self.fetched_records.extend(records)
		return records


#============================================
class StaticEventSource:
	"""
	Serve a pre-captured record list as if it were one fully fetched page.
	"""

	first_page = FIRST_PAGE

	def __init__(self, records: list[dict]):
		self.records = list(records)
		self.fetched_records: list[dict] = []

	#============================================
	def fetch(self, user: str, page: int) -> list[dict]:
		if page != self.first_page:
			return []
		self.fetched_records = list(self.records)
		return list(self.records)


#============================================
def read_capture(path: str) -> list[dict]:
	"""
	Read a JSON capture: either a bare list or a mapping with an events list.
	"""
	resolved = os.path.abspath(path)
	if not os.path.isfile(resolved):
		raise CaptureFormatError(f"Events capture not found: {resolved}")
	with open(resolved, "r", encoding="utf-8") as handle:
		try:
			payload = json.load(handle)
		except json.JSONDecodeError as error:
			raise CaptureFormatError(f"Events capture is not valid JSON: {resolved}: {error}") from error
	if isinstance(payload, dict):
		payload = payload.get("events")
	if not isinstance(payload, list):
		raise CaptureFormatError(f"Events capture must hold a list of events: {resolved}")
	return payload


#============================================
def load_static_source(path: str) -> StaticEventSource:
	"""
	Build a static source from a capture file.
	"""
	return StaticEventSource(read_capture(path))


#============================================
def write_capture(path: str, user: str, records: list[dict]) -> str:
	"""
	Write fetched records in the capture format read_capture accepts.
	"""
	resolved = os.path.abspath(path)
	output_dir = os.path.dirname(resolved)
	if output_dir:
		os.makedirs(output_dir, exist_ok=True)
	payload = {
		"user": user,
		"events": records,
	}
	with open(resolved, "w", encoding="utf-8") as handle:
		json.dump(payload, handle, ensure_ascii=True, sort_keys=True, indent=2)
		handle.write("\n")
	return resolved
