"""
Create authenticated sessions for access to GitHub and Pivotal Tracker.
"""

from typing import Optional

import requests
from urlobject import URLObject

from github_tracker_sync import settings


class BaseUrlSession(requests.Session):
    """
    A requests Session class that applies a base URL to the requested URL.

    Absolute paths ("/repos/...") are appended to the base URL, so that a base
    URL with a path of its own (like "https://ghe.example.com/api/v3") keeps
    it.  Full URLs, like the ones in pagination headers, are used as-is.
    """
    def __init__(self, base_url):
        super().__init__()
        self.base_url = URLObject(base_url)

    def request(self, method, url, data=None, headers=None, **kwargs):
        url = str(url)
        if url.startswith("/"):
            url = str(self.base_url).rstrip("/") + url
        return super().request(
            method=method,
            url=url,
            data=data,
            headers=headers,
            **kwargs
        )


def get_github_session(token: str, base_url: Optional[str] = None) -> BaseUrlSession:
    """
    Get the GitHub session to use.

    `base_url` overrides the GitHub API root, for GitHub Enterprise.
    """
    session = BaseUrlSession(base_url=base_url or settings.GITHUB_API_URL)
    session.headers["Authorization"] = f"token {token}"
    session.headers["Accept"] = "application/vnd.github+json"
    session.trust_env = False   # prevent reading the local .netrc
    return session


def get_tracker_session(token: str) -> BaseUrlSession:
    """
    Get the Pivotal Tracker session to use.
    """
    session = BaseUrlSession(base_url=settings.TRACKER_API_URL)
    session.headers["X-TrackerToken"] = token
    session.trust_env = False   # prevent reading the local .netrc
    return session
