"""
Generic utilities.
"""

from typing import Optional

import sentry_sdk
from urlobject import URLObject

from github_tracker_sync import logger, settings


class RequestFailed(Exception):
    """An HTTP request got an error response."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def log_check_response(response, raise_for_status=True):
    """
    Logs HTTP request and response at debug level and checks if it succeeded.

    Arguments:
        response (requests.Response)
        raise_for_status (bool): if True, call raise_for_status on the response
            also.
    """
    msg = "Request: {0.method} {0.url}: {0.body!r}".format(response.request)
    logger.debug(msg)
    msg = "Response: {0.status_code} {0.reason!r} for {0.url}: {0.content!r}".format(response)
    logger.debug(msg)
    if raise_for_status:
        try:
            response.raise_for_status()
        except Exception as exc:
            req = response.request
            raise RequestFailed(
                f"HTTP request failed: {req.method} {req.url}. Response body: {response.content}",
                status_code=response.status_code,
            ) from exc


def get_rate_limit(session) -> dict:
    """Get stats from GitHub about the current rate limit."""
    resp = session.get("/rate_limit")
    log_check_response(resp)
    return resp.json()['rate']


def text_summary(text, length=40):
    """
    Make a summary of `text`, at most `length` chars long.

    The middle will be elided if needed.
    """
    if len(text) <= length:
        return text
    else:
        start = (length - 3) // 2
        end = length - 3 - start
        return text[:start] + "..." + text[-end:]


def paginated_get(url, session, per_page=None, callback=None, **kwargs):
    """
    Retrieve all objects from a paginated API.

    Assumes that the pagination is specified in the "link" header, like
    Github's v3 API.  Stops when there is no "next" link, or when a page comes
    back empty.

    """
    url = URLObject(url).set_query_param('per_page', str(per_page or settings.GITHUB_PER_PAGE))
    while url:
        resp = session.get(url, **kwargs)
        log_check_response(resp)
        if callable(callback):
            callback(resp)
        items = resp.json()
        if not items:
            break
        yield from items
        url = None
        if resp.links:
            url = resp.links.get("next", {}).get("url", "")


def tracker_paginated_get(url, session, limit=None, **params):
    """
    Like ``paginated_get``, but uses Pivotal Tracker's conventions for a
    paginated API, which are offset-based.

    Tracker reports the pagination in X-Tracker-Pagination-* headers.  If they
    are missing, the endpoint isn't paginated and the first page is all there
    is.
    """
    limit = limit or settings.TRACKER_PAGE_LIMIT
    offset = 0
    while True:
        page_params = dict(params, offset=offset, limit=limit)
        resp = session.get(url, params=page_params)
        log_check_response(resp)
        items = resp.json()
        if not items:
            break
        yield from items
        offset += len(items)
        total = resp.headers.get("X-Tracker-Pagination-Total")
        if total is None or offset >= int(total):
            break


def sentry_extra_context(data_dict):
    """Apply the keys and values from data_dict to the Sentry extra context."""
    for key, value in data_dict.items():
        sentry_sdk.set_extra(key, value)
