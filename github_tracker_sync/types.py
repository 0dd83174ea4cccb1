"""Types specific to github_tracker_sync."""

from __future__ import annotations

import dataclasses
import enum
from typing import Dict, List, Optional

import arrow

# A GitHub issue as described by a JSON object.  Pull requests are issues too.
IssueDict = Dict

# An issue comment as described by a JSON object.
CommentDict = Dict

# A GitHub repository as described by a JSON object.
RepoDict = Dict


@dataclasses.dataclass(frozen=True)
class IssueId:
    """An id of an issue, with a repo full_name and a number."""
    full_name: str
    number: int

    @classmethod
    def from_issue_dict(cls, repo: RepoDict, issue: IssueDict) -> IssueId:
        return cls(repo["full_name"], issue["number"])

    def __str__(self):
        # This is also the Tracker label that links stories to the issue.
        return f"{self.full_name}#{self.number}"


class TrackerDataError(Exception):
    """
    Tracker sent us something we don't understand.

    This means the two systems disagree about their vocabulary, and nothing
    safe can be concluded from the data, so it stops the whole run.
    """


class UnknownStoryState(TrackerDataError):
    """A story is in a state we've never heard of."""


class UnknownStoryType(TrackerDataError):
    """A story has a type we've never heard of."""


class StoryType(str, enum.Enum):
    FEATURE = "feature"
    BUG = "bug"
    CHORE = "chore"
    RELEASE = "release"

    @classmethod
    def parse(cls, value: str) -> StoryType:
        try:
            return cls(value)
        except ValueError:
            raise UnknownStoryType(f"unknown story type: {value!r}") from None


class StoryState(str, enum.Enum):
    UNSCHEDULED = "unscheduled"
    UNSTARTED = "unstarted"
    PLANNED = "planned"
    STARTED = "started"
    FINISHED = "finished"
    DELIVERED = "delivered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: str) -> StoryState:
        try:
            return cls(value)
        except ValueError:
            raise UnknownStoryState(f"unknown story state: {value!r}") from None


@dataclasses.dataclass(frozen=True)
class TrackerLabel:
    """A label in a Tracker project."""
    name: str
    id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Dict) -> TrackerLabel:
        return cls(name=data["name"], id=data.get("id"))


@dataclasses.dataclass
class Story:
    """A Pivotal Tracker story."""
    name: str
    story_type: StoryType
    current_state: StoryState
    id: Optional[int] = None
    description: str = ""
    labels: List[TrackerLabel] = dataclasses.field(default_factory=list)
    accepted_at: Optional[arrow.Arrow] = None
    url: str = ""

    @classmethod
    def from_json(cls, data: Dict) -> Story:
        accepted_at = data.get("accepted_at")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description") or "",
            story_type=StoryType.parse(data["story_type"]),
            current_state=StoryState.parse(data["current_state"]),
            labels=[TrackerLabel.from_json(lbl) for lbl in data.get("labels", [])],
            accepted_at=arrow.get(accepted_at) if accepted_at else None,
            url=data.get("url", ""),
        )

    def as_new_story_json(self) -> Dict:
        """The JSON to POST to create this story."""
        return {
            "name": self.name,
            "description": self.description,
            "story_type": self.story_type.value,
            "current_state": self.current_state.value,
            "labels": [{"name": lbl.name} for lbl in self.labels],
        }

    def has_label(self, name: str) -> bool:
        return any(lbl.name == name for lbl in self.labels)

    def label_named(self, name: str) -> Optional[TrackerLabel]:
        for lbl in self.labels:
            if lbl.name == name:
                return lbl
        return None
