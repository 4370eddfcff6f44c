"""Decoding of raw public-feed records into typed activity events.

Each raw record is validated once, here, and converted into an
ActivityEvent carrying exactly one payload variant. Records whose type
promises payload fields that are missing fail with MalformedEventError
instead of being skipped.
"""

# Standard Library
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone


REACTION_APPROVED = "approved"
REACTION_OTHER = "other"

PUSH_EVENT = "PushEvent"
PULL_REQUEST_EVENT = "PullRequestEvent"
REVIEW_EVENT = "PullRequestReviewEvent"
ISSUE_COMMENT_EVENT = "IssueCommentEvent"


#============================================
class MalformedEventError(RuntimeError):
	"""
	Raised when an event record lacks a field its type requires.
	"""


#============================================
@dataclass(frozen=True)
class PushActivity:
	pass


#============================================
@dataclass(frozen=True)
class PullRequestOpened:
	url: str
	title: str


#============================================
@dataclass(frozen=True)
class PullRequestOther:
	action: str


#============================================
@dataclass(frozen=True)
class ReviewActivity:
	url: str
	title: str
	reaction: str
	submitted_at: datetime | None = None


#============================================
@dataclass(frozen=True)
class IssueCommentActivity:
	url: str
	title: str


#============================================
@dataclass(frozen=True)
class OtherActivity:
	pass


ACTIVITY_VARIANTS = (
	PushActivity,
	PullRequestOpened,
	PullRequestOther,
	ReviewActivity,
	IssueCommentActivity,
	OtherActivity,
)


#============================================
@dataclass(frozen=True)
class ActivityEvent:
	event_id: str
	event_type: str
	actor_login: str
	repo_name: str
	created_at: datetime
	activity: object
	raw: dict = field(default_factory=dict, compare=False, repr=False)


#============================================
def parse_timestamp(ts: str) -> datetime:
	"""
	Parse an ISO timestamp string into a timezone-aware UTC datetime.
	"""
	parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed.astimezone(timezone.utc)


#============================================
def require_field(record: dict, path: list[str], event_label: str):
	"""
	Walk a key path through nested mappings, failing on the first gap.
	"""
	current = record
	for index, key in enumerate(path):
		if not isinstance(current, dict) or current.get(key) is None:
			missing = ".".join(path[: index + 1])
			raise MalformedEventError(f"Event {event_label} is missing required field '{missing}'")
		current = current[key]
	return current


#============================================
def require_text(record: dict, path: list[str], event_label: str) -> str:
	"""
	Read a required field and coerce it to text.
	"""
	value = require_field(record, path, event_label)
	if isinstance(value, (dict, list)):
		raise MalformedEventError(
			f"Event {event_label} field '{'.'.join(path)}' must be a scalar value"
		)
	return str(value)


#============================================
def classify_reaction(state: str) -> str:
	"""
	Map a review state onto the approved/other reaction split.
	"""
	if state.strip().lower() == "approved":
		return REACTION_APPROVED
	return REACTION_OTHER


#============================================
def decode_activity(event_type: str, payload: dict, event_label: str):
	"""
	Build the payload variant for one event type.
	"""
	if event_type == PUSH_EVENT:
		return PushActivity()
	if event_type == PULL_REQUEST_EVENT:
		action = require_text(payload, ["action"], event_label)
		require_field(payload, ["pull_request"], event_label)
		if action != "opened":
			return PullRequestOther(action=action)
		return PullRequestOpened(
			url=require_text(payload, ["pull_request", "html_url"], event_label),
			title=require_text(payload, ["pull_request", "title"], event_label),
		)
	if event_type == REVIEW_EVENT:
		state = require_text(payload, ["review", "state"], event_label)
		submitted_text = payload["review"].get("submitted_at")
		submitted_at = None
		if submitted_text:
			try:
				submitted_at = parse_timestamp(str(submitted_text))
			except ValueError as error:
				raise MalformedEventError(
					f"Event {event_label} has unparseable review.submitted_at: {submitted_text!r}"
				) from error
		return ReviewActivity(
			url=require_text(payload, ["pull_request", "html_url"], event_label),
			title=require_text(payload, ["pull_request", "title"], event_label),
			reaction=classify_reaction(state),
			submitted_at=submitted_at,
		)
	if event_type == ISSUE_COMMENT_EVENT:
		return IssueCommentActivity(
			url=require_text(payload, ["issue", "html_url"], event_label),
			title=require_text(payload, ["issue", "title"], event_label),
		)
	return OtherActivity()


#============================================
def decode_event(record: dict) -> ActivityEvent:
	"""
	Validate one raw feed record and convert it to an ActivityEvent.

	Raises:
		MalformedEventError: when the envelope or the type-specific payload
			is missing a required field.
	"""
	if not isinstance(record, dict):
		raise MalformedEventError(f"Event record must be a mapping; got {type(record).__name__}")
	event_label = str(record.get("id") or "(no id)")
	event_id = require_text(record, ["id"], event_label)
	event_type = require_text(record, ["type"], event_label)
	actor_login = require_text(record, ["actor", "login"], event_label)
	repo_name = require_text(record, ["repo", "name"], event_label)
	created_text = require_text(record, ["created_at"], event_label)
	try:
		created_at = parse_timestamp(created_text)
	except ValueError as error:
		raise MalformedEventError(
			f"Event {event_label} has unparseable created_at: {created_text!r}"
		) from error
	payload = record.get("payload") or {}
	if not isinstance(payload, dict):
		raise MalformedEventError(f"Event {event_label} payload must be a mapping")
	activity = decode_activity(event_type, payload, f"{event_label} ({event_type})")
	return ActivityEvent(
		event_id=event_id,
		event_type=event_type,
		actor_login=actor_login,
		repo_name=repo_name,
		created_at=created_at,
		activity=activity,
		raw=record,
	)


#============================================
def decode_events(records: list) -> list[ActivityEvent]:
	"""
	Decode a list of raw records, keeping their order.
	"""
	return [decode_event(record) for record in records]
