"""
Reading data from Pivotal Tracker.
"""

from typing import Dict, List

from github_tracker_sync.story_set import StorySet
from github_tracker_sync.types import Story
from github_tracker_sync.utils import log_check_response, tracker_paginated_get

# The story states Tracker counts labels in.
COUNTED_STATES = [
    "unscheduled", "unstarted", "planned", "started",
    "finished", "delivered", "accepted", "rejected",
]


def project_url(project_id: int, path: str = "") -> str:
    return f"/projects/{project_id}{path}"


def get_stories(session, project_id: int, label: str | None = None) -> StorySet:
    """
    Get the stories in a project, optionally only those with a label.
    """
    params = {}
    if label is not None:
        params["with_label"] = label
    url = project_url(project_id, "/stories")
    return StorySet(
        Story.from_json(data) for data in tracker_paginated_get(url, session=session, **params)
    )


def get_labels(session, project_id: int) -> List[Dict]:
    """Get all the labels in a project, with their story counts."""
    resp = session.get(project_url(project_id, "/labels"), params={"fields": ":default,counts"})
    log_check_response(resp)
    return resp.json()


def label_story_count(label: Dict) -> int:
    """How many stories, in any state, have this label?"""
    by_state = label.get("counts", {}).get("number_of_stories_by_state", {})
    return sum(by_state.get(state, 0) for state in COUNTED_STATES)
