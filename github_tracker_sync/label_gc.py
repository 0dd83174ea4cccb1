"""
Finding Tracker labels that no story uses any more.
"""

from typing import List

from github_tracker_sync import logger
from github_tracker_sync.tracker import get_labels, label_story_count
from github_tracker_sync.utils import RequestFailed


class LabelGCer:
    """
    Collect the unused labels in a Tracker project.

    By default this only reports what it would delete.  Deleting is a
    separate decision: pass `delete=True` to really do it.
    """

    def __init__(self, tracker_session, project_id: int, actions, delete: bool = False):
        self.tracker = tracker_session
        self.project_id = project_id
        self.actions = actions
        self.delete = delete

    def gc(self) -> List[str]:
        """
        Find (and maybe delete) labels with no stories.

        Returns the names of the unused labels.
        """
        try:
            labels = get_labels(self.tracker, self.project_id)
        except RequestFailed:
            logger.exception("Failed to fetch Tracker labels")
            return []

        unused = []
        for label in labels:
            if label_story_count(label) > 0:
                continue

            unused.append(label["name"])
            if not self.delete:
                logger.info(f"Unused label {label['name']!r}, not deleting it (dry run)")
                continue

            logger.info(f"Deleting unused label {label['name']!r}")
            try:
                self.actions.delete_tracker_label(label_id=label["id"])
            except Exception:    # pylint: disable=broad-exception-caught
                logger.exception(f"Failed to delete label {label['name']!r}")
        return unused
