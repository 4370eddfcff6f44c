"""Time windows and the paginated fetch loop over a newest-first feed.

A window with no end is the single-cutoff case: everything at or after
start counts. With an end, events newer than the end are tallied as
excluded_after instead of being kept.
"""

# Standard Library
from dataclasses import dataclass
from datetime import datetime
from datetime import time
from datetime import timedelta
from datetime import timezone
from datetime import tzinfo

# local repo modules
from digestlib import activity_events


BEFORE = "before"
INSIDE = "inside"
AFTER = "after"

DEFAULT_PAGE_CEILING = 5


#============================================
class PaginationExhaustedError(RuntimeError):
	"""
	Raised when the fetch loop passes the page ceiling without reaching old events.
	"""


#============================================
@dataclass(frozen=True)
class ActivityWindow:
	start: datetime
	end: datetime | None = None

	def __post_init__(self):
		if self.start.tzinfo is None:
			raise ValueError("window start must be timezone-aware")
		if self.end is not None:
			if self.end.tzinfo is None:
				raise ValueError("window end must be timezone-aware")
			if self.end < self.start:
				raise ValueError(
					f"window end {self.end.isoformat()} precedes start {self.start.isoformat()}"
				)

	#============================================
	@property
	def is_bounded(self) -> bool:
		return self.end is not None

	#============================================
	def classify(self, moment: datetime) -> str:
		"""
		Place a timestamp before, inside or after the window; both edges are inclusive.
		"""
		if moment < self.start:
			return BEFORE
		if self.end is not None and moment > self.end:
			return AFTER
		return INSIDE

	#============================================
	def describe(self) -> str:
		end_text = self.end.isoformat() if self.end is not None else "now"
		return f"{self.start.isoformat()} -> {end_text}"


#============================================
@dataclass
class PagePartition:
	inside: list
	excluded_before: int = 0
	excluded_after: int = 0

	#============================================
	@property
	def qualifying_count(self) -> int:
		"""
		User-owned events that are in the window or newer than it.
		"""
		return len(self.inside) + self.excluded_after


#============================================
@dataclass(frozen=True)
class WindowSlice:
	events: list
	excluded_before: int
	excluded_after: int | None
	pages_fetched: int


#============================================
def is_user_event(event: activity_events.ActivityEvent, user: str) -> bool:
	"""
	Logins are case-insensitive on GitHub.
	"""
	return event.actor_login.casefold() == user.casefold()


#============================================
def partition_events(
	events: list[activity_events.ActivityEvent],
	user: str,
	window: ActivityWindow,
) -> PagePartition:
	"""
	Split one page of decoded events against the window.

	Events from other actors are dropped without being counted. Source
	order is preserved for the events kept.
	"""
	partition = PagePartition(inside=[])
	for event in events:
		if not is_user_event(event, user):
			continue
		position = window.classify(event.created_at)
		if position == BEFORE:
			partition.excluded_before += 1
		elif position == AFTER:
			partition.excluded_after += 1
		else:
			partition.inside.append(event)
	return partition


#============================================
def fetch_window_events(
	source,
	user: str,
	window: ActivityWindow,
	page_ceiling: int = DEFAULT_PAGE_CEILING,
	log_fn=None,
) -> WindowSlice:
	"""
	Walk source pages until a page holds no in-window or newer user events.

	Args:
		source: object with a first_page attribute and fetch(user, page).
		user: login whose events are kept.
		window: time window to keep.
		page_ceiling: highest page index that may be followed by another fetch.
		log_fn: optional progress callback.

	Returns:
		WindowSlice with in-window events in source order plus exclusion
		counts. excluded_after is None for an unbounded window.

	Raises:
		PaginationExhaustedError: when a page past the ceiling still qualifies.
		MalformedEventError: when a fetched record fails decoding.
	"""
	kept = []
	excluded_before = 0
	excluded_after = 0
	page = source.first_page
	pages_fetched = 0
	while True:
		if log_fn is not None:
			log_fn(f"Querying events page {page}")
		records = source.fetch(user, page)
		pages_fetched += 1
		decoded = activity_events.decode_events(records)
		partition = partition_events(decoded, user, window)
		kept.extend(partition.inside)
		excluded_before += partition.excluded_before
		excluded_after += partition.excluded_after
		if partition.qualifying_count == 0:
			if log_fn is not None:
				log_fn(f"Page {page} holds no events at or after the window start; stopping.")
			break
		if page > page_ceiling:
			raise PaginationExhaustedError(
				f"Would exceed page ceiling {page_ceiling} fetching events for {user} "
				+ f"(window {window.describe()})"
			)
		page += 1
	if log_fn is not None:
		log_fn(
			f"Collected {len(kept)} in-window event(s) over {pages_fetched} page(s); "
			+ f"excluded {excluded_before} older, {excluded_after} newer."
		)
	return WindowSlice(
		events=kept,
		excluded_before=excluded_before,
		excluded_after=excluded_after if window.is_bounded else None,
		pages_fetched=pages_fetched,
	)


#============================================
def lookback_window(days: int, now_utc: datetime | None = None) -> ActivityWindow:
	"""
	Single-cutoff window covering the trailing day count.
	"""
	if days < 1:
		raise ValueError(f"days must be >= 1; got {days}")
	value = now_utc or datetime.now(timezone.utc)
	if value.tzinfo is None:
		value = value.replace(tzinfo=timezone.utc)
	return ActivityWindow(start=value - timedelta(days=days))


#============================================
def business_day_window(offset_days: int, now: datetime, zone: tzinfo) -> ActivityWindow:
	"""
	Two-sided window for the business day before the target day.

	The target day is the date of now in zone, minus offset_days. The
	window ends at the target day's midnight in zone and starts at the
	midnight one day earlier, or three days earlier when the target is a
	Monday so that Friday through Sunday is covered. Both edges are
	computed from calendar dates, so a DST change inside the window moves
	neither edge off local midnight.
	"""
	if offset_days < 0:
		raise ValueError(f"offset must be >= 0; got {offset_days}")
	if now.tzinfo is None:
		raise ValueError("now must be timezone-aware")
	target_day = now.astimezone(zone).date() - timedelta(days=offset_days)
	span_days = 1
	# Monday
	if target_day.weekday() == 0:
		span_days = 3
	start_day = target_day - timedelta(days=span_days)
	window_start = datetime.combine(start_day, time(0, 0), tzinfo=zone)
	window_end = datetime.combine(target_day, time(0, 0), tzinfo=zone)
	return ActivityWindow(
		start=window_start.astimezone(timezone.utc),
		end=window_end.astimezone(timezone.utc),
	)
