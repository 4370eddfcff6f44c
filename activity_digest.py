#!/usr/bin/env python3
# Standard Library
import argparse
import sys
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from datetime import tzinfo

import rich.console

# local repo modules
from digestlib import activity_aggregate
from digestlib import activity_window
from digestlib import digest_settings
from digestlib import event_source
from digestlib import github_client
from digestlib import report_render


RICH_CONSOLE = rich.console.Console(stderr=True)


#============================================
@dataclass(frozen=True)
class DigestConfig:
	user: str
	window: activity_window.ActivityWindow
	from_file: str = ""
	save_events: str = ""
	page_ceiling: int = activity_window.DEFAULT_PAGE_CEILING
	token: str = ""


#============================================
def log_step(message: str) -> None:
	"""
	Print one timestamped progress line to stderr.
	"""
	now_text = datetime.now().strftime("%H:%M:%S")
	line = f"[activity_digest {now_text}] {message}"
	lower = message.lower()
	style = "cyan"
	if ("failed" in lower) or ("error" in lower) or ("exceed" in lower):
		style = "bold red"
	elif ("rate limit" in lower) or ("stopping" in lower):
		style = "yellow"
	elif ("wrote " in lower) or ("collected" in lower):
		style = "green"
	RICH_CONSOLE.print(line, style=style, markup=False, highlight=False)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Summarize one GitHub user's public activity by repository."
	)
	parser.add_argument(
		"--user",
		required=True,
		help="GitHub login whose public events are summarized.",
	)
	window_group = parser.add_mutually_exclusive_group()
	window_group.add_argument(
		"--days",
		type=int,
		default=None,
		help="Look back this many days from now (default 1).",
	)
	window_group.add_argument(
		"--business-day-offset",
		type=int,
		default=None,
		help=(
			"Summarize the business day before today minus this many days; "
			+ "a Monday target covers Friday through Sunday."
		),
	)
	parser.add_argument(
		"--from-file",
		default="",
		help="Read events from a JSON capture instead of the live API.",
	)
	parser.add_argument(
		"--save-events",
		default="",
		help="Write the fetched raw events to this JSON capture path.",
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for token and page ceiling.",
	)
	args = parser.parse_args(argv)
	return args


#============================================
def resolve_window(
	args: argparse.Namespace,
	now: datetime | None = None,
	zone: tzinfo | None = None,
) -> activity_window.ActivityWindow:
	"""
	Resolve the selected window flag into an ActivityWindow.

	zone is only consulted for business-day windows and defaults to UTC.
	"""
	value = now or datetime.now(timezone.utc)
	if args.business_day_offset is not None:
		return activity_window.business_day_window(args.business_day_offset, value, zone or timezone.utc)
	days = args.days if args.days is not None else 1
	return activity_window.lookback_window(days, value)


#============================================
def build_config(args: argparse.Namespace, settings: dict, now: datetime | None = None) -> DigestConfig:
	"""
	Combine arguments and settings into one DigestConfig.
	"""
	user = args.user.strip()
	if not user:
		raise RuntimeError("--user must not be empty")
	zone = None
	if args.business_day_offset is not None:
		zone = digest_settings.get_timezone(settings)
	return DigestConfig(
		user=user,
		window=resolve_window(args, now, zone),
		from_file=(args.from_file or "").strip(),
		save_events=(args.save_events or "").strip(),
		page_ceiling=digest_settings.get_page_ceiling(settings),
		token=digest_settings.get_github_token(settings),
	)


#============================================
def build_source(config: DigestConfig, log_fn=None):
	"""
	Pick the static capture or the live API as event source.
	"""
	if config.from_file:
		return event_source.load_static_source(config.from_file), None
	client = github_client.GitHubClient(config.token, log_fn=log_fn)
	return event_source.LiveEventSource(client), client


#============================================
def emit(log_fn, message: str) -> None:
	if log_fn is not None:
		log_fn(message)


#============================================
def run_digest(config: DigestConfig, log_fn=None) -> str:
	"""
	Fetch, aggregate and render the digest for one configured run.
	"""
	source, client = build_source(config, log_fn=log_fn)
	if config.from_file:
		emit(log_fn, f"Reading events from capture: {config.from_file}")
	elif config.token:
		emit(log_fn, "Using authenticated GitHub API mode.")
	else:
		emit(log_fn, "Using unauthenticated GitHub API mode (lower rate limit).")
	emit(log_fn, f"Active window: {config.window.describe()}")
	window_slice = activity_window.fetch_window_events(
		source,
		config.user,
		config.window,
		page_ceiling=config.page_ceiling,
		log_fn=log_fn,
	)
	if config.save_events:
		capture_path = event_source.write_capture(
			config.save_events,
			config.user,
			source.fetched_records,
		)
		emit(log_fn, f"Wrote {len(source.fetched_records)} raw event(s) to {capture_path}")
	report = activity_aggregate.aggregate_slice(window_slice)
	if client is not None:
		usage = client.api_usage_snapshot()
		emit(log_fn, f"GitHub API usage: calls={usage.get('api_call_count', 0)}")
	return report_render.render_report(report)


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Run the digest and print it; return the process exit status.
	"""
	args = parse_args(argv)
	try:
		settings, settings_path = digest_settings.load_settings(args.settings)
		log_step(f"Using settings file: {settings_path}")
		config = build_config(args, settings)
		log_step(f"Using GitHub user: {config.user}")
		text = run_digest(config, log_fn=log_step)
	except (RuntimeError, ValueError, OSError) as error:
		log_step(f"Digest failed: {error}")
		return 1
	if hasattr(sys.stdout, "reconfigure"):
		sys.stdout.reconfigure(encoding="utf-8")
	sys.stdout.write(text)
	sys.stdout.flush()
	return 0


if __name__ == "__main__":
	sys.exit(main())
