# Standard Library
from datetime import datetime
from datetime import timezone

import requests
from github import Auth
from github import Github
from github.GithubException import GithubException


#============================================
class RateLimitError(RuntimeError):
	"""
	Raised when GitHub API rate limits block further requests.
	"""


#============================================
class GitHubTransportError(RuntimeError):
	"""
	Raised when a GitHub API call fails for any reason other than rate limits.
	"""


#============================================
class GitHubClient:
	"""
	Thin PyGithub wrapper for the public events feed.
	"""

	def __init__(self, token: str, log_fn=None):
		self.log_fn = log_fn
		self._api_call_count = 0
		self._api_calls_by_context: dict[str, int] = {}
		self.client = self._build_github_client(token)

	#============================================
	def _build_github_client(self, token: str) -> Github:
		"""
		Create Github client with retry disabled so failures surface at once.
		"""
		if token:
			return Github(auth=Auth.Token(token), retry=None)
		return Github(retry=None)

	#============================================
	def log(self, message: str) -> None:
		"""
		Emit one log line when logger is configured.
		"""
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def record_api_call(self, context: str) -> None:
		"""
		Track one outbound GitHub API call.
		"""
		self._api_call_count += 1
		if context not in self._api_calls_by_context:
			self._api_calls_by_context[context] = 0
		self._api_calls_by_context[context] += 1

	#============================================
	def api_usage_snapshot(self) -> dict:
		"""
		Return API call counters for reporting.
		"""
		return {
			"api_call_count": self._api_call_count,
			"api_calls_by_context": dict(self._api_calls_by_context),
		}

	#============================================
	def parse_rate_limit_reset(self, reset_value) -> datetime:
		"""
		Normalize PyGithub reset values to timezone-aware UTC datetime.
		"""
		if isinstance(reset_value, datetime):
			if reset_value.tzinfo is None:
				return reset_value.replace(tzinfo=timezone.utc)
			return reset_value.astimezone(timezone.utc)
		if isinstance(reset_value, (int, float)):
			return datetime.fromtimestamp(float(reset_value), tz=timezone.utc)
		if isinstance(reset_value, str):
			return datetime.fromisoformat(reset_value.replace("Z", "+00:00"))
		raise RuntimeError(f"Unsupported rate-limit reset value: {reset_value!r}")

	#============================================
	def get_core_rate_limit_snapshot(self) -> tuple[int, datetime]:
		"""
		Read core rate-limit remaining/reset across PyGithub versions.
		"""
		self.record_api_call("GET /rate_limit")
		overview = self.client.get_rate_limit()
		rate_limit = getattr(overview, "core", None)
		if rate_limit is None:
			resources = getattr(overview, "resources", None)
			if isinstance(resources, dict):
				rate_limit = resources.get("core")
			elif resources is not None:
				rate_limit = getattr(resources, "core", None)
		if rate_limit is None:
			raise RuntimeError("Rate limit data does not expose core resource fields.")
		remaining = int(getattr(rate_limit, "remaining"))
		reset_time = self.parse_rate_limit_reset(getattr(rate_limit, "reset"))
		return remaining, reset_time

	#============================================
	def raise_from_github_error(self, error: GithubException, context: str) -> None:
		"""
		Raise a human-readable rate-limit or transport error.
		"""
		status = getattr(error, "status", None)
		if status != 403:
			raise GitHubTransportError(
				f"GitHub API request failed while {context}: status={status}; {error}"
			) from error
		reset_text = "unknown"
		remaining_text = "unknown"
		try:
			remaining, reset_time = self.get_core_rate_limit_snapshot()
			reset_text = reset_time.isoformat()
			remaining_text = str(remaining)
		except (GithubException, RuntimeError, requests.exceptions.RequestException) as lookup_error:
			self.log(f"Rate limit lookup failed: {lookup_error}")
		raise RateLimitError(
			"GitHub API rate limit exceeded while "
			+ f"{context}; remaining={remaining_text}; reset_at={reset_text}. "
			+ "Provide settings.yaml github.token for higher limits."
		) from error

	#============================================
	def list_public_events_page(self, user: str, page: int) -> list[dict]:
		"""
		Fetch one page of a user's public events, newest first.

		Pages are numbered from 1 to match the REST API query parameter.
		"""
		if page < 1:
			raise ValueError(f"page must be >= 1; got {page}")
		context = f"GET /users/{user}/events/public?page={page}"
		self.record_api_call(context)
		try:
			events = self.client.get_user(user).get_public_events().get_page(page - 1)
			records = [getattr(event_obj, "raw_data", {}) or {} for event_obj in events]
		except GithubException as error:
			self.raise_from_github_error(error, f"fetching events page {page} for {user}")
		except requests.exceptions.RequestException as error:
			raise GitHubTransportError(
				f"GitHub API request failed while fetching events page {page} for {user}: {error}"
			) from error
		self.log(f"Fetched events page {page} for {user}: {len(records)} record(s)")
		return records
