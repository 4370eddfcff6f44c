# local repo modules
from digestlib import activity_aggregate
from digestlib import activity_events


REVIEW_MARKERS = {
	activity_events.REACTION_APPROVED: "✅",
	activity_events.REACTION_OTHER: "💬",
}
ITEM_INDENT = "    - "
SECTION_INDENT = "  "


#============================================
def format_link(title: str, url: str) -> str:
	"""
	Render a markdown link with whitespace trimmed from both parts.
	"""
	return f"[{(title or '').strip()}]({(url or '').strip()})"


#============================================
def render_repo(name: str, repo: activity_aggregate.RepoActivity) -> list[str]:
	"""
	Render one repository block; sections with nothing in them are left out.
	"""
	lines = [name]
	if repo.pr_opened:
		lines.append(f"{SECTION_INDENT}Pull requests:")
		for url in repo.pr_opened:
			lines.append(ITEM_INDENT + format_link(repo.title_for(url), url))
	if repo.reviewed:
		lines.append(f"{SECTION_INDENT}Reviews:")
		for url, reaction in repo.reviewed.items():
			marker = REVIEW_MARKERS.get(reaction, REVIEW_MARKERS[activity_events.REACTION_OTHER])
			lines.append(f"{ITEM_INDENT}{marker} " + format_link(repo.title_for(url), url))
	if repo.commented_issues:
		lines.append(f"{SECTION_INDENT}Comments:")
		for url in repo.commented_issues:
			lines.append(ITEM_INDENT + format_link(repo.title_for(url), url))
	if repo.push_count > 0:
		lines.append(f"{SECTION_INDENT}Pushes: {repo.push_count}")
	return lines


#============================================
def render_report(report: activity_aggregate.AggregateReport) -> str:
	"""
	Render the whole report as text, repositories in name order.
	"""
	blocks = []
	for name, repo in report.sorted_repos():
		if repo.is_empty():
			continue
		blocks.append("\n".join(render_repo(name, repo)))
	if not blocks:
		blocks.append("No activity in this window.")
	trailer = [f"Events before window: {report.excluded_before}"]
	if report.excluded_after is not None:
		trailer.append(f"Events after window: {report.excluded_after}")
	blocks.append("\n".join(trailer))
	return "\n\n".join(blocks) + "\n"
