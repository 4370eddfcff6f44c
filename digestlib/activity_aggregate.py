"""Per-repository folding of in-window activity events.

Input order matters: the feed is newest first, and every bucket keeps
the first entry it sees for a URL, so the most recent classification
and title win. Callers that reorder events must restore that order
before aggregating.
"""

# Standard Library
from dataclasses import dataclass
from dataclasses import field

# local repo modules
from digestlib import activity_events
from digestlib import activity_window


#============================================
@dataclass
class RepoActivity:
	# dicts used as insertion-ordered sets
	pr_opened: dict = field(default_factory=dict)
	reviewed: dict = field(default_factory=dict)
	commented_issues: dict = field(default_factory=dict)
	push_count: int = 0
	titles: dict = field(default_factory=dict)

	#============================================
	def record_title(self, url: str, title: str) -> None:
		if url not in self.titles:
			self.titles[url] = title

	#============================================
	def title_for(self, url: str) -> str:
		return self.titles.get(url, "")

	#============================================
	def apply_precedence(self) -> None:
		"""
		Leave each URL in one bucket only: opened, then reviewed, then commented.
		"""
		for url in self.pr_opened:
			self.reviewed.pop(url, None)
			self.commented_issues.pop(url, None)
		for url in self.reviewed:
			self.commented_issues.pop(url, None)

	#============================================
	def is_empty(self) -> bool:
		return (
			not self.pr_opened
			and not self.reviewed
			and not self.commented_issues
			and self.push_count == 0
		)


#============================================
@dataclass
class AggregateReport:
	repos: dict = field(default_factory=dict)
	excluded_before: int = 0
	excluded_after: int | None = None

	#============================================
	def repo(self, name: str) -> RepoActivity:
		if name not in self.repos:
			self.repos[name] = RepoActivity()
		return self.repos[name]

	#============================================
	def sorted_repos(self) -> list[tuple[str, RepoActivity]]:
		return sorted(self.repos.items(), key=lambda item: item[0])


#============================================
def fold_event(report: AggregateReport, event: activity_events.ActivityEvent) -> None:
	"""
	Apply one event to its repository's buckets.
	"""
	repo = report.repo(event.repo_name)
	activity = event.activity
	if isinstance(activity, activity_events.PushActivity):
		repo.push_count += 1
	elif isinstance(activity, activity_events.PullRequestOpened):
		if activity.url not in repo.pr_opened:
			repo.pr_opened[activity.url] = None
		repo.record_title(activity.url, activity.title)
	elif isinstance(activity, activity_events.ReviewActivity):
		if activity.url not in repo.reviewed:
			repo.reviewed[activity.url] = activity.reaction
		repo.record_title(activity.url, activity.title)
	elif isinstance(activity, activity_events.IssueCommentActivity):
		if activity.url not in repo.commented_issues:
			repo.commented_issues[activity.url] = None
		repo.record_title(activity.url, activity.title)
	elif isinstance(activity, (activity_events.PullRequestOther, activity_events.OtherActivity)):
		pass
	else:
		raise TypeError(f"Unhandled activity variant: {type(activity).__name__}")


#============================================
def aggregate_events(
	events: list[activity_events.ActivityEvent],
	excluded_before: int = 0,
	excluded_after: int | None = None,
) -> AggregateReport:
	"""
	Fold events in input order, then settle bucket precedence per repository.
	"""
	report = AggregateReport(
		excluded_before=excluded_before,
		excluded_after=excluded_after,
	)
	for event in events:
		fold_event(report, event)
	for repo in report.repos.values():
		repo.apply_precedence()
	return report


#============================================
def aggregate_slice(window_slice: activity_window.WindowSlice) -> AggregateReport:
	return aggregate_events(
		window_slice.events,
		excluded_before=window_slice.excluded_before,
		excluded_after=window_slice.excluded_after,
	)
