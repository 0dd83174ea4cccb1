"""Tests of code in utils.py"""

import pytest

from github_tracker_sync.utils import (
    RequestFailed,
    get_rate_limit,
    paginated_get,
    text_summary,
    tracker_paginated_get,
)


@pytest.mark.parametrize("args, summary", [
    (["Hello"], "Hello"),
    ([""], ""),
    (["lorem ipsum quia dolor sit amet consecte"], "lorem ipsum quia dolor sit amet consecte"),
    (["lorem ipsum quia dolor sit amet consectetur adipisci velit, sed quia non numquam eius modi tempora incidunt."],
      "lorem ipsum quia d...i tempora incidunt."),
    (["lorem ipsum quia dolor sit amet consectetur adipisci velit, quia non numquam eius modi tempora incidunt.", 80],
      "lorem ipsum quia dolor sit amet consec...non numquam eius modi tempora incidunt."),
])
def test_text_summary(args, summary):
    assert summary == text_summary(*args)


def test_paginated_get_follows_links(requests_mocker, github_session):
    base = "https://api.github.com/repos/acme/widgets/issues"
    requests_mocker.get(
        f"{base}?per_page=2",
        json=[{"number": 1}, {"number": 2}],
        headers={"Link": f'<{base}?per_page=2&page=2>; rel="next"'},
    )
    requests_mocker.get(
        f"{base}?per_page=2&page=2",
        json=[{"number": 3}],
    )
    items = list(paginated_get("/repos/acme/widgets/issues", session=github_session, per_page=2))
    assert [item["number"] for item in items] == [1, 2, 3]
    assert len(requests_mocker.request_history) == 2


def test_paginated_get_stops_on_empty_page(requests_mocker, github_session):
    base = "https://api.github.com/repos/acme/widgets/issues"
    requests_mocker.get(
        f"{base}?per_page=100",
        json=[],
        headers={"Link": f'<{base}?per_page=100&page=2>; rel="next"'},
    )
    assert list(paginated_get("/repos/acme/widgets/issues", session=github_session)) == []
    assert len(requests_mocker.request_history) == 1


def test_failed_request_has_status_code(requests_mocker, github_session):
    requests_mocker.get("https://api.github.com/orgs/nobody/repos?per_page=100", status_code=404, json={})
    with pytest.raises(RequestFailed) as exc_info:
        list(paginated_get("/orgs/nobody/repos", session=github_session))
    assert exc_info.value.status_code == 404
    assert "GET https://api.github.com/orgs/nobody/repos" in str(exc_info.value)


def test_tracker_paginated_get(fake_tracker, project, tracker_session):
    for i in range(5):
        project.make_story(name=f"Story {i}", labels=["acme/widgets#1"])
    project.make_story(name="Unrelated")

    url = f"/projects/{project.id}/stories"
    stories = list(tracker_paginated_get(url, session=tracker_session, with_label="acme/widgets#1"))

    assert [s["name"] for s in stories] == [f"Story {i}" for i in range(5)]
    # The test settings make pages of two.
    assert len(fake_tracker.requests_made(method="GET")) == 3


def test_tracker_paginated_get_without_pagination(requests_mocker, tracker_session):
    requests_mocker.get(
        "https://www.pivotaltracker.com/services/v5/projects/1/things",
        json=[{"id": 1}, {"id": 2}],
    )
    assert len(list(tracker_paginated_get("/projects/1/things", session=tracker_session))) == 2
    assert len(requests_mocker.request_history) == 1


def test_get_rate_limit(fake_github, github_session):
    fake_github.rate_remaining = 17
    assert get_rate_limit(github_session)["remaining"] == 17
