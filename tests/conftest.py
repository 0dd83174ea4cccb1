"""Automatically run by pytest to set up test infrastructure."""

import pytest
import requests_mock

from github_tracker_sync.auth import get_github_session, get_tracker_session

from . import settings as test_settings
from .fake_github import FakeGitHub
from .fake_tracker import FakeTracker

# The Tracker project all the tests use.
PROJECT_ID = 2468


@pytest.fixture
def requests_mocker():
    """Make requests_mock available as a fixture."""
    mocker = requests_mock.Mocker(real_http=False, case_sensitive=True)
    mocker.start()
    try:
        yield mocker
    finally:
        mocker.stop()


@pytest.fixture(autouse=True)
def settings_for_tests(mocker):
    for name, value in vars(test_settings).items():
        if name.isupper():
            mocker.patch(f"github_tracker_sync.settings.{name}", value)


@pytest.fixture
def fake_github(requests_mocker):
    the_fake_github = FakeGitHub(login="tracker-bot")
    the_fake_github.install_mocks(requests_mocker)
    return the_fake_github


@pytest.fixture
def fake_tracker(requests_mocker):
    the_fake_tracker = FakeTracker(test_settings.TRACKER_API_URL)
    the_fake_tracker.make_project(PROJECT_ID)
    the_fake_tracker.install_mocks(requests_mocker)
    return the_fake_tracker


@pytest.fixture
def project(fake_tracker):
    """The fake Tracker project the tests sync into."""
    return fake_tracker.get_project(PROJECT_ID)


@pytest.fixture
def github_session():
    return get_github_session("github_pat_FooBarBaz")


@pytest.fixture
def tracker_session():
    return get_tracker_session("tracker-token-xyzzy")
