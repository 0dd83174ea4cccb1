"""Tests of label_gc.py"""

from github_tracker_sync.actions import FixingActions
from github_tracker_sync.label_gc import LabelGCer


def make_gcer(tracker_session, github_session, project, delete=False):
    actions = FixingActions(github_session, tracker_session, project.id)
    return LabelGCer(tracker_session, project.id, actions, delete=delete)


def test_reports_unused_labels(fake_tracker, project, tracker_session, github_session):
    project.make_story(name="One", labels=["acme/widgets#1"])
    project.make_story(name="Two", current_state="accepted", labels=["acme/widgets#2"])
    project.get_or_make_label("acme/widgets#3")
    project.get_or_make_label("old-stuff")

    unused = make_gcer(tracker_session, github_session, project).gc()

    assert sorted(unused) == ["acme/widgets#3", "old-stuff"]
    fake_tracker.assert_readonly()
    assert "old-stuff" in project.labels


def test_deletes_unused_labels(fake_tracker, project, tracker_session, github_session):
    project.make_story(name="One", labels=["acme/widgets#1"])
    old = project.get_or_make_label("old-stuff")

    unused = make_gcer(tracker_session, github_session, project, delete=True).gc()

    assert unused == ["old-stuff"]
    assert list(project.labels) == ["acme/widgets#1"]
    assert fake_tracker.writing_requests() == [(f"/projects/{project.id}/labels/{old.id}", "DELETE")]


def test_failure_to_get_labels(requests_mocker, tracker_session, github_session, fake_tracker, project):
    requests_mocker.get(
        f"https://www.pivotaltracker.com/services/v5/projects/{project.id}/labels",
        status_code=403,
        json={"kind": "error", "code": "unauthorized_operation"},
    )

    assert make_gcer(tracker_session, github_session, project, delete=True).gc() == []
