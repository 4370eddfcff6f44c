"""Tests for digestlib/activity_events.py."""

# Standard Library
import os
import sys
from datetime import datetime
from datetime import timezone

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from digestlib import activity_events

import event_records


PR_URL = "https://github.com/octo/alpha/pull/7"


#============================================
def test_decode_push_event():
	"""Push events decode to PushActivity with a UTC timestamp."""
	event = activity_events.decode_event(event_records.push(created_at="2026-02-22T12:00:00Z"))
	assert isinstance(event.activity, activity_events.PushActivity)
	assert event.repo_name == "octo/alpha"
	assert event.actor_login == "octocat"
	assert event.created_at == datetime(2026, 2, 22, 12, 0, tzinfo=timezone.utc)


#============================================
def test_decode_pull_request_opened():
	"""Opened pull requests carry html_url and title."""
	event = activity_events.decode_event(event_records.pr_opened(PR_URL, "Add parser"))
	assert event.activity == activity_events.PullRequestOpened(url=PR_URL, title="Add parser")


#============================================
def test_decode_pull_request_other_action():
	"""Non-opened pull request actions decode to PullRequestOther."""
	event = activity_events.decode_event(event_records.pr_closed(PR_URL, "Add parser"))
	assert event.activity == activity_events.PullRequestOther(action="closed")


#============================================
def test_decode_review_reactions():
	"""Only the approved state maps to the approved reaction."""
	approved = activity_events.decode_event(event_records.review(PR_URL, "t", state="APPROVED"))
	commented = activity_events.decode_event(event_records.review(PR_URL, "t", state="commented"))
	changes = activity_events.decode_event(event_records.review(PR_URL, "t", state="changes_requested"))
	assert approved.activity.reaction == activity_events.REACTION_APPROVED
	assert commented.activity.reaction == activity_events.REACTION_OTHER
	assert changes.activity.reaction == activity_events.REACTION_OTHER
	assert approved.activity.submitted_at is not None


#============================================
def test_decode_issue_comment():
	"""Issue comments use the issue html_url as target."""
	url = "https://github.com/octo/alpha/issues/3"
	event = activity_events.decode_event(event_records.issue_comment(url, "Crash on start"))
	assert event.activity == activity_events.IssueCommentActivity(url=url, title="Crash on start")


#============================================
def test_decode_unknown_type_skips_payload_checks():
	"""Unclassified event types decode even with an empty payload."""
	record = event_records.watch()
	record["payload"] = {}
	event = activity_events.decode_event(record)
	assert isinstance(event.activity, activity_events.OtherActivity)


#============================================
def test_decode_keeps_raw_record():
	"""The raw record is kept on the event for captures."""
	record = event_records.push()
	event = activity_events.decode_event(record)
	assert event.raw is record


#============================================
def test_missing_pull_request_is_fatal():
	"""A pull request event without payload.pull_request fails decoding."""
	record = event_records.pr_opened(PR_URL, "t")
	del record["payload"]["pull_request"]
	with pytest.raises(activity_events.MalformedEventError, match="pull_request"):
		activity_events.decode_event(record)


#============================================
def test_missing_review_state_is_fatal():
	"""A review event without review.state fails decoding."""
	record = event_records.review(PR_URL, "t")
	del record["payload"]["review"]["state"]
	with pytest.raises(activity_events.MalformedEventError, match="review.state"):
		activity_events.decode_event(record)


#============================================
def test_missing_issue_title_is_fatal():
	"""An issue comment event without issue.title fails decoding."""
	record = event_records.issue_comment("https://github.com/octo/alpha/issues/3", "t")
	del record["payload"]["issue"]["title"]
	with pytest.raises(activity_events.MalformedEventError, match="issue.title"):
		activity_events.decode_event(record)


#============================================
def test_missing_envelope_fields_are_fatal():
	"""Every event needs actor.login, repo.name and created_at."""
	for path in (["actor", "login"], ["repo", "name"], ["created_at"]):
		record = event_records.push()
		target = record
		for key in path[:-1]:
			target = target[key]
		del target[path[-1]]
		with pytest.raises(activity_events.MalformedEventError):
			activity_events.decode_event(record)


#============================================
def test_bad_timestamp_is_fatal():
	"""An unparseable created_at fails decoding."""
	record = event_records.push(created_at="yesterday")
	with pytest.raises(activity_events.MalformedEventError, match="created_at"):
		activity_events.decode_event(record)


#============================================
def test_non_mapping_record_is_fatal():
	"""Records that are not mappings fail decoding."""
	with pytest.raises(activity_events.MalformedEventError):
		activity_events.decode_event(["PushEvent"])
