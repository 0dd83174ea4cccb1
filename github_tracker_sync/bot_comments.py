"""
The bot makes comments on issues, and writes story descriptions. This is
stuff needed to do it well.
"""

from enum import Enum, auto
from typing import Iterable

import arrow
import jinja2

from github_tracker_sync.types import IssueDict, IssueId, Story


class BotComment(Enum):
    """
    Comments the bot can leave on issues.
    """
    TRACKER_STATUS = auto()
    ISSUE_CLOSED = auto()


BOT_COMMENT_INDICATORS = {
    BotComment.TRACKER_STATUS: [
        "<!-- comment:tracker_status -->",
    ],
    BotComment.ISSUE_CLOSED: [
        "<!-- comment:tracker_closed -->",
    ],
}


_templates = jinja2.Environment(
    loader=jinja2.PackageLoader("github_tracker_sync", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    autoescape=False,
)


def render_template(template_name: str, **context) -> str:
    return _templates.get_template(template_name).render(**context)


def is_comment_kind(kind: BotComment, text: str) -> bool:
    """
    Is this `text` a comment of this `kind`?
    """
    return any(snip in text for snip in BOT_COMMENT_INDICATORS[kind])


def tracker_status_comment(stories: Iterable[Story]) -> str:
    """
    The comment listing the stories for an issue, checked off if accepted.
    """
    return render_template("tracker_status_comment.md.j2", stories=list(stories))


def issue_closed_comment(stories: Iterable[Story]) -> str:
    """
    The comment explaining why we are closing an issue.
    """
    return render_template("issue_closed_comment.md.j2", stories=list(stories))


def _format_date(timestamp) -> str:
    return arrow.get(timestamp).format("MMMM D")


def story_description(issue_id: IssueId, issue: IssueDict, verb: str, when: str) -> str:
    """
    Describe where a story came from: "[@someone](...) opened [org/repo#12](...) on May 3".
    """
    user = issue["user"]
    return "[@{login}]({user_url}) {verb} [{label}]({issue_url}) on {date}".format(
        login=user["login"],
        user_url=user["html_url"],
        verb=verb,
        label=issue_id,
        issue_url=issue["html_url"],
        date=_format_date(when),
    )
