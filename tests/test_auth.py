"""Tests of the sessions in auth.py"""

from github_tracker_sync.auth import get_github_session, get_tracker_session


def test_github_session(requests_mocker):
    requests_mocker.get("https://api.github.com/user", json={"login": "tracker-bot"})
    session = get_github_session("github_pat_FooBarBaz")
    assert session.get("/user").json() == {"login": "tracker-bot"}
    headers = requests_mocker.request_history[0].headers
    assert headers["Authorization"] == "token github_pat_FooBarBaz"


def test_github_enterprise_keeps_its_path(requests_mocker):
    requests_mocker.get("https://ghe.example.com/api/v3/user", json={"login": "ghe-bot"})
    session = get_github_session("xyzzy", base_url="https://ghe.example.com/api/v3/")
    assert session.get("/user").json() == {"login": "ghe-bot"}


def test_full_urls_are_untouched(requests_mocker):
    requests_mocker.get("https://api.github.com/repositories/123/issues?page=2", json=[])
    session = get_github_session("xyzzy")
    assert session.get("https://api.github.com/repositories/123/issues?page=2").json() == []


def test_tracker_session(requests_mocker):
    requests_mocker.get("https://www.pivotaltracker.com/services/v5/me", json={"username": "bot"})
    session = get_tracker_session("tracker-token-xyzzy")
    assert session.get("/me").json() == {"username": "bot"}
    assert requests_mocker.request_history[0].headers["X-TrackerToken"] == "tracker-token-xyzzy"
