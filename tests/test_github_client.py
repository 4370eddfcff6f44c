# Standard Library
import os
import sys
from datetime import datetime
from datetime import timezone
from types import SimpleNamespace

import pytest
import requests
from github.GithubException import GithubException

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from digestlib import github_client


#============================================
class StubPaginatedList:
	def __init__(self, pages: list[list], error: Exception | None = None):
		self.pages = pages
		self.error = error
		self.requested = []

	def get_page(self, index: int) -> list:
		self.requested.append(index)
		if self.error is not None:
			raise self.error
		if index >= len(self.pages):
			return []
		return self.pages[index]


#============================================
def make_stub_client(overview_object=None, events=None, get_user=None):
	"""
	Build GitHubClient instance with mocked PyGithub responses.
	"""
	client = github_client.GitHubClient.__new__(github_client.GitHubClient)
	client.log_fn = None
	client._api_call_count = 0
	client._api_calls_by_context = {}
	user_obj = SimpleNamespace(get_public_events=lambda: events)
	client.client = SimpleNamespace(
		get_rate_limit=lambda: overview_object,
		get_user=get_user or (lambda login: user_obj),
	)
	return client


#============================================
def test_core_rate_limit_snapshot_from_core_attribute() -> None:
	"""
	Rate limit should parse from overview.core shape.
	"""
	reset_time = datetime(2026, 2, 22, 3, 30, 0, tzinfo=timezone.utc)
	overview = SimpleNamespace(core=SimpleNamespace(remaining=42, reset=reset_time))
	client = make_stub_client(overview)
	remaining, parsed_reset = client.get_core_rate_limit_snapshot()
	assert remaining == 42
	assert parsed_reset == reset_time


#============================================
def test_core_rate_limit_snapshot_from_resources_dict() -> None:
	"""
	Rate limit should parse from overview.resources['core'] shape.
	"""
	overview = SimpleNamespace(
		resources={"core": SimpleNamespace(remaining=3, reset=1761110400)}
	)
	client = make_stub_client(overview)
	remaining, parsed_reset = client.get_core_rate_limit_snapshot()
	assert remaining == 3
	assert parsed_reset.tzinfo is not None


#============================================
def test_list_public_events_page_maps_to_zero_based_page() -> None:
	"""
	Page 1 should read PyGithub page index 0 and return raw dicts.
	"""
	events = StubPaginatedList([
		[SimpleNamespace(raw_data={"id": "1"}), SimpleNamespace(raw_data={"id": "2"})],
		[SimpleNamespace(raw_data={"id": "3"})],
	])
	client = make_stub_client(events=events)
	assert client.list_public_events_page("octocat", 1) == [{"id": "1"}, {"id": "2"}]
	assert client.list_public_events_page("octocat", 2) == [{"id": "3"}]
	assert events.requested == [0, 1]
	assert client.api_usage_snapshot()["api_call_count"] == 2


#============================================
def test_list_public_events_page_rejects_page_zero() -> None:
	"""
	Pages start at 1.
	"""
	client = make_stub_client(events=StubPaginatedList([]))
	with pytest.raises(ValueError):
		client.list_public_events_page("octocat", 0)


#============================================
def test_transport_failure_is_raised() -> None:
	"""
	Non-403 API failures should surface as GitHubTransportError.
	"""
	events = StubPaginatedList([], error=GithubException(404, {"message": "Not Found"}, None))
	client = make_stub_client(events=events)
	with pytest.raises(github_client.GitHubTransportError, match="status=404"):
		client.list_public_events_page("ghost", 1)


#============================================
def test_rate_limit_failure_is_raised() -> None:
	"""
	403 failures should surface as RateLimitError with reset details.
	"""
	reset_time = datetime(2026, 2, 22, 3, 30, 0, tzinfo=timezone.utc)
	overview = SimpleNamespace(core=SimpleNamespace(remaining=0, reset=reset_time))
	events = StubPaginatedList([], error=GithubException(403, {"message": "rate limited"}, None))
	client = make_stub_client(overview, events=events)
	with pytest.raises(github_client.RateLimitError, match="remaining=0"):
		client.list_public_events_page("octocat", 1)


#============================================
def test_rate_limit_failure_with_unknown_shape() -> None:
	"""
	Unknown rate-limit shape still yields RateLimitError.
	"""
	events = StubPaginatedList([], error=GithubException(403, {"message": "rate limited"}, None))
	client = make_stub_client(SimpleNamespace(resources={}), events=events)
	with pytest.raises(github_client.RateLimitError, match="remaining=unknown"):
		client.list_public_events_page("octocat", 1)


#============================================
def test_connection_failure_is_raised_as_transport_error() -> None:
	"""
	Network failures below PyGithub should surface as GitHubTransportError.
	"""
	def refuse(login):
		raise requests.exceptions.ConnectionError("network down")

	client = make_stub_client(get_user=refuse)
	with pytest.raises(github_client.GitHubTransportError, match="network down") as excinfo:
		client.list_public_events_page("octocat", 1)
	assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)
