"""
The writes the synchronizer makes to GitHub and Tracker.
"""

import itertools
from typing import Dict, List
from urllib.parse import quote

from github_tracker_sync import logger
from github_tracker_sync.tracker import project_url
from github_tracker_sync.utils import RequestFailed, log_check_response, text_summary


class DryRunFixingActions:
    """
    Implementation of actions for dry runs.
    """
    def __init__(self):
        self.action_calls = []
        self.story_ids = itertools.count(start=900001)

    def create_story(self, **kwargs) -> Dict:
        # This needs a special override because it has to return a story.
        self.action_calls.append(("create_story", kwargs))
        story_id = next(self.story_ids)
        return dict(
            kwargs,
            id=story_id,
            labels=[{"name": lbl["name"]} for lbl in kwargs["labels"]],
            url=f"https://www.pivotaltracker.com/story/show/{story_id}",
        )

    def __getattr__(self, name):
        def fn(**kwargs):
            self.action_calls.append((name, kwargs))
        return fn


class FixingActions:
    """
    Implementation for actions needed by the synchronizer.

    These actions actually make the changes needed. All arguments
    must be JSON-serializable so that dry-runs can report on the
    actions.

    """

    def __init__(self, github_session, tracker_session, project_id: int):
        self.github = github_session
        self.tracker = tracker_session
        self.project_id = project_id

    def _story_url(self, story_id: int, path: str = "") -> str:
        return project_url(self.project_id, f"/stories/{story_id}{path}")

    # Tracker

    def create_story(
        self, *,
        name: str,
        description: str,
        story_type: str,
        current_state: str,
        labels: List[Dict],
    ) -> Dict:
        """
        Create a new story.

        Returns the JSON describing the story.
        """
        new_story = {
            "name": name,
            "description": description,
            "story_type": story_type,
            "current_state": current_state,
            "labels": labels,
        }
        resp = self.tracker.post(project_url(self.project_id, "/stories"), json=new_story)
        log_check_response(resp)
        return resp.json()

    def delete_story(self, *, story_id: int) -> None:
        resp = self.tracker.delete(self._story_url(story_id))
        log_check_response(resp)

    def update_story(self, *, story_id: int, **fields) -> None:
        """
        Change fields on a story: name, story_type, or current_state.
        """
        logger.info(f"Updating story #{story_id}: {fields}")
        resp = self.tracker.put(self._story_url(story_id), json=fields)
        log_check_response(resp)

    def add_story_label(self, *, story_id: int, label: str) -> None:
        logger.info(f"Adding label {label!r} to story #{story_id}")
        resp = self.tracker.post(self._story_url(story_id, "/labels"), json={"name": label})
        log_check_response(resp)

    def remove_story_label(self, *, story_id: int, label_id: int) -> None:
        logger.info(f"Removing label {label_id} from story #{story_id}")
        resp = self.tracker.delete(self._story_url(story_id, f"/labels/{label_id}"))
        log_check_response(resp)

    def delete_tracker_label(self, *, label_id: int) -> None:
        resp = self.tracker.delete(project_url(self.project_id, f"/labels/{label_id}"))
        log_check_response(resp)

    # GitHub

    def create_repo_label(self, *, repo: str, name: str, color: str) -> None:
        logger.info(f"Creating label {name!r} with color {color!r} in repo {repo}")
        label = {"name": name}
        if color:
            # With no color, GitHub picks one.
            label["color"] = color
        resp = self.github.post(f"/repos/{repo}/labels", json=label)
        log_check_response(resp)

    def update_repo_label(self, *, repo: str, name: str, color: str) -> None:
        logger.info(f"Updating label {name!r} in repo {repo}")
        url = f"/repos/{repo}/labels/{quote(name, safe='')}"
        resp = self.github.patch(url, json={"color": color})
        log_check_response(resp)

    def add_comment_to_issue(self, *, repo: str, number: int, comment_body: str) -> None:
        """
        Add a comment to an issue.
        """
        url = f"/repos/{repo}/issues/{number}/comments"
        logger.info(f"Commenting on {repo}#{number}: {text_summary(comment_body, 90)!r}")
        resp = self.github.post(url, json={"body": comment_body})
        log_check_response(resp)

    def edit_comment_on_issue(self, *, repo: str, number: int, comment_id: int, comment_body: str) -> None:
        """
        Edit a bot-authored comment on an issue.
        """
        url = f"/repos/{repo}/issues/comments/{comment_id}"
        logger.info(f"Updating comment on {repo}#{number}: {text_summary(comment_body, 90)!r}")
        resp = self.github.patch(url, json={"body": comment_body})
        log_check_response(resp)

    def add_labels_to_issue(self, *, repo: str, number: int, labels: List[str]) -> None:
        url = f"/repos/{repo}/issues/{number}/labels"
        logger.info(f"Adding labels to {repo}#{number}: {labels}")
        resp = self.github.post(url, json={"labels": labels})
        log_check_response(resp)

    def remove_label_from_issue(self, *, repo: str, number: int, label: str) -> None:
        """
        Remove a label from an issue.  It's fine if the label is already gone.
        """
        url = f"/repos/{repo}/issues/{number}/labels/{quote(label, safe='')}"
        logger.info(f"Removing label {label!r} from {repo}#{number}")
        resp = self.github.delete(url)
        try:
            log_check_response(resp)
        except RequestFailed as exc:
            if exc.status_code != 404:
                raise

    def close_issue(self, *, repo: str, number: int) -> None:
        url = f"/repos/{repo}/issues/{number}"
        logger.info(f"Closing {repo}#{number}")
        resp = self.github.patch(url, json={"state": "closed"})
        log_check_response(resp)
