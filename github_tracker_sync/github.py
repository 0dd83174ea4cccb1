"""
Reading data from GitHub.
"""

from typing import Any, Dict, Iterable, List

from github_tracker_sync import logger
from github_tracker_sync.types import CommentDict, IssueDict, IssueId, RepoDict
from github_tracker_sync.utils import RequestFailed, log_check_response, paginated_get


def get_whoami(session) -> Dict:
    """Get the user the session is authenticated as."""
    resp = session.get("/user")
    log_check_response(resp)
    return resp.json()


def get_public_repos(session, owner: str) -> List[RepoDict]:
    """
    Get the public repos of an organization.

    Organizations and users share a namespace, so if there's no organization
    by that name, or it has no repos, try the user's repos instead.
    """
    repos: List[RepoDict] = []
    try:
        repos = list(paginated_get(f"/orgs/{owner}/repos?type=public", session=session))
    except RequestFailed as exc:
        if exc.status_code != 404:
            raise
    if not repos:
        logger.info(f"No organization repos for {owner}, looking for user repos")
        repos = list(paginated_get(f"/users/{owner}/repos?type=public", session=session))
    return repos


def get_open_issues(session, repo: RepoDict) -> Iterable[IssueDict]:
    """Get the open issues (including pull requests) of a repo."""
    url = f"/repos/{repo['full_name']}/issues?state=open"
    return paginated_get(url, session=session)


def count_open_issues(session, owner: str, repo_names: Iterable[str] = ()) -> int:
    """
    Ask GitHub search how many open issues there are.

    With no `repo_names`, counts across everything `owner` owns.
    """
    terms = ["state:open"]
    repo_names = sorted(repo_names)
    if repo_names:
        terms.extend(f"repo:{owner}/{name}" for name in repo_names)
    else:
        terms.append(f"user:{owner}")
    resp = session.get("/search/issues", params={"q": " ".join(terms), "per_page": 1})
    log_check_response(resp)
    return resp.json()["total_count"]


def get_repo_labels(session, repo: RepoDict) -> Dict[str, Dict[str, Any]]:
    """Get a dict mapping label names to full label info."""
    url = f"/repos/{repo['full_name']}/labels"
    repo_labels = {lbl["name"]: lbl for lbl in paginated_get(url, session=session)}
    return repo_labels


def get_issue_comments(session, issue_id: IssueId) -> Iterable[CommentDict]:
    url = f"/repos/{issue_id.full_name}/issues/{issue_id.number}/comments"
    return paginated_get(url, session=session)


def get_comments_by(session, issue_id: IssueId, login: str) -> Iterable[CommentDict]:
    """Find all the comments `login` has made on an issue."""
    for comment in get_issue_comments(session, issue_id):
        if comment["user"]["login"] == login:
            yield comment


def issue_label_names(issue: IssueDict) -> List[str]:
    return [lbl["name"] for lbl in issue["labels"]]


def issue_has_pull_request(issue: IssueDict) -> bool:
    return issue.get("pull_request") is not None
