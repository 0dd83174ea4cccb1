"""
State-based synchronizing of GitHub issues and Tracker stories.
"""

from __future__ import annotations

import contextlib
import dataclasses
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import arrow

from github_tracker_sync import logger
from github_tracker_sync.actions import FixingActions
from github_tracker_sync.bot_comments import (
    BotComment,
    is_comment_kind,
    issue_closed_comment,
    story_description,
    tracker_status_comment,
)
from github_tracker_sync.github import (
    count_open_issues,
    get_comments_by,
    get_open_issues,
    get_public_repos,
    get_repo_labels,
    get_whoami,
    issue_has_pull_request,
    issue_label_names,
)
from github_tracker_sync.labels import (
    HAS_PR_LABEL,
    LABEL_BUG,
    LABEL_ENHANCEMENT,
    STORY_STATE_LABELS,
    normalize_color,
    stock_labels,
)
from github_tracker_sync.story_set import StorySet
from github_tracker_sync.tracker import get_stories
from github_tracker_sync.types import (
    IssueDict,
    IssueId,
    RepoDict,
    Story,
    StoryState,
    StoryType,
    TrackerDataError,
    TrackerLabel,
)
from github_tracker_sync.utils import RequestFailed, sentry_extra_context


def issue_story_type(issue: IssueDict) -> StoryType:
    """What type of story does an issue's labels ask for?"""
    label_names = issue_label_names(issue)
    if LABEL_ENHANCEMENT in label_names:
        return StoryType.FEATURE
    if LABEL_BUG in label_names:
        return StoryType.BUG
    return StoryType.CHORE


def chore_for_new_issue(issue_id: IssueId, issue: IssueDict) -> Story:
    """The story to create for an issue that has none yet."""
    labels = [TrackerLabel(str(issue_id))]
    if issue_has_pull_request(issue):
        logger.info(f"  has pull request: {issue['pull_request'].get('html_url')}")
        labels.append(TrackerLabel(HAS_PR_LABEL))

    return Story(
        name=issue["title"],
        description=story_description(issue_id, issue, "opened", issue["created_at"]),
        story_type=StoryType.CHORE,
        current_state=StoryState.UNSCHEDULED,
        labels=labels,
    )


def chore_for_reopened_issue(issue_id: IssueId, issue: IssueDict) -> Story:
    """The story to create for an issue opened again after its stories were accepted."""
    return Story(
        name="reopened: " + issue["title"],
        description=story_description(issue_id, issue, "reopened", issue["updated_at"]),
        story_type=StoryType.CHORE,
        current_state=StoryState.UNSCHEDULED,
        labels=[TrackerLabel(str(issue_id))],
    )


@dataclass
class SyncResult:
    """
    Return value from Syncer.sync_issues_and_stories.
    """
    # The repos that were synced, by full name.
    repos: List[str] = field(default_factory=list)
    # The issues that were synced without error, as link labels.
    synced_issues: List[str] = field(default_factory=list)
    # The ids of the stories created.
    created_stories: List[int] = field(default_factory=list)
    # The ids of the duplicate stories deleted.
    deleted_stories: List[int] = field(default_factory=list)
    # The issues that were closed, as link labels.
    closed_issues: List[str] = field(default_factory=list)


class Syncer:
    """
    Compare the issues in GitHub with the stories in Tracker, and make needed changes.
    """

    def __init__(
        self,
        github_session,
        tracker_session,
        project_id: int,
        organization: str,
        repositories: Iterable[str] = (),
        additional_labels: Optional[Dict[str, str]] = None,
        actions=None,
    ) -> None:
        self.github = github_session
        self.tracker = tracker_session
        self.project_id = project_id
        self.organization = organization
        self.repositories = set(repositories)
        self.additional_labels = dict(additional_labels or {})
        self.actions = actions or FixingActions(github_session, tracker_session, project_id)

        self.sync_result = SyncResult()
        self.exceptions: List[Exception] = []
        self._current_user: Optional[Dict] = None

    def result(self) -> SyncResult:
        return self.sync_result

    def current_user(self) -> Dict:
        """The GitHub user we are, fetched only once."""
        if self._current_user is None:
            self._current_user = get_whoami(self.github)
        return self._current_user

    @contextlib.contextmanager
    def saved_exceptions(self, what: str):
        """
        A context manager to wrap around isolatable steps.

        An exception raised in the with-block will be logged and added to
        `self.exceptions`.  Bad data from Tracker isn't isolatable, it stops
        everything.
        """
        try:
            yield
        except TrackerDataError:
            raise
        except Exception as exc:    # pylint: disable=broad-exception-caught
            logger.exception(f"Syncing failed for {what}")
            exc.add_note(f"While syncing {what}")
            self.exceptions.append(exc)

    def sync_issues_and_stories(self) -> SyncResult:
        """
        The main routine: sync every open issue in every repo we care about.

        Failures for individual issues don't stop the run.  They are raised
        together in an ExceptionGroup at the end.
        """
        repos = self.repos_to_sync()
        self._log_open_issue_count()

        for repo in repos:
            repo_name = repo["full_name"]
            sentry_extra_context({"repo": repo_name})
            logger.info(f"Syncing {repo_name}")

            try:
                self.sync_repo_stock_labels(repo)
            except Exception:    # pylint: disable=broad-exception-caught
                logger.exception(f"Failed setting up labels; skipping {repo_name}")
                continue

            self.sync_result.repos.append(repo_name)
            self.process_repo_issues(repo)

        if self.exceptions:
            raise ExceptionGroup("Some issues failed to sync", self.exceptions)
        return self.sync_result

    def repos_to_sync(self) -> List[RepoDict]:
        repos = get_public_repos(self.github, self.organization)
        if self.repositories:
            repos = [
                repo for repo in repos
                if repo["name"] in self.repositories or repo["full_name"] in self.repositories
            ]
        return repos

    def _log_open_issue_count(self) -> None:
        repo_names = {name.rpartition("/")[-1] for name in self.repositories}
        try:
            count = count_open_issues(self.github, self.organization, repo_names)
        except RequestFailed:
            logger.warning("Couldn't count open issues", exc_info=True)
        else:
            logger.info(f"{count} open issues to sync for {self.organization}")

    def sync_repo_stock_labels(self, repo: RepoDict) -> None:
        """
        Make sure a repo has all the labels we use, with the right colors.

        Labels configured with no color keep whatever color they have.
        Labels are never deleted.
        """
        repo_name = repo["full_name"]
        existing_labels = get_repo_labels(self.github, repo)

        for name, color in stock_labels(self.additional_labels).items():
            color = normalize_color(color)
            existing = existing_labels.get(name)
            if existing is None:
                self.actions.create_repo_label(repo=repo_name, name=name, color=color)
            elif color and color != normalize_color(existing.get("color") or ""):
                self.actions.update_repo_label(repo=repo_name, name=name, color=color)

    def process_repo_issues(self, repo: RepoDict) -> None:
        repo_name = repo["full_name"]
        issues: List[IssueDict] = []
        with self.saved_exceptions(f"issues of {repo_name}"):
            issues = list(get_open_issues(self.github, repo))

        for issue in issues:
            issue_id = IssueId.from_issue_dict(repo, issue)
            sentry_extra_context({"issue": str(issue_id)})
            with self.saved_exceptions(str(issue_id)):
                self.sync_issue(repo, issue)
                self.sync_result.synced_issues.append(str(issue_id))

    def sync_issue(self, repo: RepoDict, issue: IssueDict) -> None:
        """
        Bring one issue and its stories into agreement.
        """
        issue_id = IssueId.from_issue_dict(repo, issue)
        link_label = str(issue_id)
        logger.info(f"Syncing {link_label}: {issue['title']}")

        stories = self._linked_stories(link_label)

        if not stories:
            created = self._create_story(chore_for_new_issue(issue_id, issue))
            logger.info(f"Created story for {link_label} at {created.url}")
            stories.append(created)
        elif stories.all_accepted() and arrow.get(issue["updated_at"]) > stories.last_accepted():
            created = self._create_story(chore_for_reopened_issue(issue_id, issue))
            logger.info(f"Created chore for reopening of {link_label} at {created.url}")
            stories.append(created)

        # Only touch a story nobody has triaged or scheduled yet.
        if len(stories) == 1 and (stories.untriaged() or stories.unscheduled()):
            stories[0] = self._sync_story_from_issue(stories[0], issue)

        self._sync_has_pr(stories, issue)
        self._ensure_status_comment(issue_id, stories)
        self._sync_issue_labels(issue_id, issue, stories.issue_labels())

        if stories.all_accepted():
            logger.info(f"All stories for {link_label} are accepted; closing!")
            self._close_issue(issue_id, stories)

    def _linked_stories(self, link_label: str) -> StorySet:
        """
        Get the stories linked to an issue, deleting any duplicates.
        """
        stories = get_stories(self.tracker, self.project_id, label=link_label).with_label(link_label)
        stories, dupes = stories.dedupe()
        for dupe in dupes:
            logger.info(f"Removing duplicate story #{dupe.id} for {link_label}")
            try:
                self.actions.delete_story(story_id=dupe.id)
            except Exception:    # pylint: disable=broad-exception-caught
                logger.exception(f"Failed to remove duplicate story #{dupe.id}")
            else:
                self.sync_result.deleted_stories.append(dupe.id)
        return stories

    def _create_story(self, story: Story) -> Story:
        created = Story.from_json(self.actions.create_story(**story.as_new_story_json()))
        self.sync_result.created_stories.append(created.id)
        return created

    def _sync_story_from_issue(self, story: Story, issue: IssueDict) -> Story:
        """
        Make a story's type, name, and labels match its issue.

        Returns the story as updated.
        """
        # A story someone has already retyped keeps its type and name.
        if story.story_type == StoryType.CHORE:
            story_type = issue_story_type(issue)

            if story.current_state == StoryState.STARTED and story_type != StoryType.CHORE:
                # Don't quietly change the type of work in progress.
                logger.info(f"Moving story #{story.id} to the icebox")
                self.actions.update_story(story_id=story.id, current_state=StoryState.UNSCHEDULED.value)
                story = dataclasses.replace(story, current_state=StoryState.UNSCHEDULED)

            if story_type != StoryType.CHORE:
                logger.info(f"Updating story #{story.id} type to {story_type.value!r}")
                self.actions.update_story(story_id=story.id, story_type=story_type.value)
                story = dataclasses.replace(story, story_type=story_type)

            if story.name != issue["title"]:
                logger.info(f"Syncing story #{story.id} name")
                self.actions.update_story(story_id=story.id, name=issue["title"])
                story = dataclasses.replace(story, name=issue["title"])

        # Tracker label names match without regard to case.
        story_labels = {lbl.name.lower() for lbl in story.labels}
        added = []
        for label in issue_label_names(issue):
            if label in STORY_STATE_LABELS or label.lower() in story_labels:
                continue
            try:
                self.actions.add_story_label(story_id=story.id, label=label)
            except Exception:    # pylint: disable=broad-exception-caught
                logger.warning(f"Failed to add label {label!r} to story #{story.id}", exc_info=True)
            else:
                added.append(TrackerLabel(label))
        if added:
            story = dataclasses.replace(story, labels=story.labels + added)

        return story

    def _sync_has_pr(self, stories: StorySet, issue: IssueDict) -> None:
        """
        Label the stories "has-pr" exactly when the issue has a pull request.
        """
        has_pr = issue_has_pull_request(issue)
        if has_pr and not stories.has_pr():
            for i, story in enumerate(stories):
                if story.has_label(HAS_PR_LABEL):
                    continue
                self.actions.add_story_label(story_id=story.id, label=HAS_PR_LABEL)
                stories[i] = dataclasses.replace(story, labels=story.labels + [TrackerLabel(HAS_PR_LABEL)])
        elif not has_pr and stories.has_pr():
            for i, story in enumerate(stories):
                label = story.label_named(HAS_PR_LABEL)
                if label is None:
                    continue
                try:
                    self.actions.remove_story_label(story_id=story.id, label_id=label.id)
                except RequestFailed as exc:
                    if exc.status_code != 404:
                        raise
                    logger.info(f"Label {HAS_PR_LABEL!r} was already gone from story #{story.id}")
                stories[i] = dataclasses.replace(
                    story,
                    labels=[lbl for lbl in story.labels if lbl.name != HAS_PR_LABEL],
                )

    def _ensure_status_comment(self, issue_id: IssueId, stories: StorySet) -> None:
        """
        Create or update the comment showing the status of the stories.

        The comment is only edited if it would change.
        """
        comment_body = tracker_status_comment(stories)

        existing_comment = None
        for comment in get_comments_by(self.github, issue_id, self.current_user()["login"]):
            if is_comment_kind(BotComment.TRACKER_STATUS, comment["body"]):
                # Comments come oldest first, we want the most recent.
                existing_comment = comment

        if existing_comment is None:
            self.actions.add_comment_to_issue(
                repo=issue_id.full_name, number=issue_id.number, comment_body=comment_body,
            )
        elif existing_comment["body"] != comment_body:
            self.actions.edit_comment_on_issue(
                repo=issue_id.full_name,
                number=issue_id.number,
                comment_id=existing_comment["id"],
                comment_body=comment_body,
            )

    def _sync_issue_labels(self, issue_id: IssueId, issue: IssueDict, labels: List[str]) -> None:
        """
        Add the labels the stories call for, and remove obsolete status labels.
        Take care to preserve any label that isn't ours to manage.
        """
        existing_labels = set(issue_label_names(issue))
        labels_to_add = [label for label in labels if label not in existing_labels]
        labels_to_remove = [
            label for label in STORY_STATE_LABELS
            if label in existing_labels and label not in labels
        ]
        if not labels_to_add and not labels_to_remove:
            return

        logger.info(f"Setting labels on {issue_id}: {', '.join(labels)}")
        for label in labels_to_remove:
            self.actions.remove_label_from_issue(
                repo=issue_id.full_name, number=issue_id.number, label=label,
            )
        if labels_to_add:
            self.actions.add_labels_to_issue(
                repo=issue_id.full_name, number=issue_id.number, labels=labels_to_add,
            )

    def _close_issue(self, issue_id: IssueId, stories: StorySet) -> None:
        self.actions.add_comment_to_issue(
            repo=issue_id.full_name,
            number=issue_id.number,
            comment_body=issue_closed_comment(stories),
        )
        self.actions.close_issue(repo=issue_id.full_name, number=issue_id.number)
        self.sync_result.closed_issues.append(str(issue_id))
