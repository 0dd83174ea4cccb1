"""
The stories linked to one issue, and what they mean for the issue.
"""

from __future__ import annotations

from typing import List, Tuple

import arrow

from github_tracker_sync.labels import (
    HAS_PR_LABEL,
    LABEL_BUG,
    LABEL_ENHANCEMENT,
    LABEL_IN_FLIGHT,
    LABEL_SCHEDULED,
    LABEL_UNSCHEDULED,
)
from github_tracker_sync.types import Story, StoryState, StoryType, UnknownStoryState

# Story states meaning someone is working on the story right now.
IN_FLIGHT_STATES = {
    StoryState.STARTED,
    StoryState.FINISHED,
    StoryState.DELIVERED,
    StoryState.REJECTED,
}

# Story states meaning the story has been prioritized, but not started.
SCHEDULED_STATES = {
    StoryState.UNSTARTED,
    StoryState.PLANNED,
}


class StorySet(list):
    """
    The Tracker stories that share one link label.

    This is a plain list of `Story` objects with questions to ask about the
    group as a whole.
    """

    def all_accepted(self) -> bool:
        return all(story.current_state == StoryState.ACCEPTED for story in self)

    def unscheduled(self) -> bool:
        """Is every story still in the icebox?"""
        return all(story.current_state == StoryState.UNSCHEDULED for story in self)

    def untriaged(self) -> bool:
        """Is every story still a chore, the type we create them with?"""
        return all(story.story_type == StoryType.CHORE for story in self)

    def has_pr(self) -> bool:
        return any(story.has_label(HAS_PR_LABEL) for story in self)

    def last_accepted(self) -> arrow.Arrow:
        """The latest acceptance time of any story, or the epoch if none."""
        last = arrow.get(0)
        for story in self:
            if story.accepted_at is not None and story.accepted_at > last:
                last = story.accepted_at
        return last

    def with_label(self, name: str) -> StorySet:
        return StorySet(story for story in self if story.has_label(name))

    def dedupe(self) -> Tuple[StorySet, StorySet]:
        """
        Split into the story to keep and the duplicates of it.

        Tracker doesn't promise any order for its results, so the oldest
        story (lowest id) is the one kept.

        Returns:
            (kept, duplicates): two StorySets.
        """
        ordered = sorted(self, key=lambda story: story.id or 0)
        return StorySet(ordered[:1]), StorySet(ordered[1:])

    def issue_labels(self) -> List[str]:
        """
        The GitHub labels the issue should have, given these stories.

        A type label comes first, if any stories are features or bugs.  Then
        a status label, unless all the stories are accepted.
        """
        labels = []

        story_types = {story.story_type for story in self}
        if StoryType.FEATURE in story_types:
            labels.append(LABEL_ENHANCEMENT)
        elif StoryType.BUG in story_types:
            labels.append(LABEL_BUG)

        if self.all_accepted():
            # Everything is accepted; only the type matters now, not status.
            return labels

        all_unscheduled = True
        for story in self:
            state = story.current_state
            if state == StoryState.ACCEPTED:
                # Some accepted and the rest unscheduled is still unscheduled.
                continue
            elif state == StoryState.UNSCHEDULED:
                continue
            elif state in IN_FLIGHT_STATES:
                labels.append(LABEL_IN_FLIGHT)
                return labels
            elif state in SCHEDULED_STATES:
                all_unscheduled = False
            else:
                raise UnknownStoryState(f"unknown story state: {state!r}")

        if all_unscheduled:
            labels.append(LABEL_UNSCHEDULED)
        else:
            labels.append(LABEL_SCHEDULED)
        return labels
