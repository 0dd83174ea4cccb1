"""
Command-line entry point: sync GitHub issues into Pivotal Tracker stories.
"""

import os
import sys

import click
import sentry_sdk

from github_tracker_sync import logger
from github_tracker_sync.actions import DryRunFixingActions, FixingActions
from github_tracker_sync.auth import get_github_session, get_tracker_session
from github_tracker_sync.label_gc import LabelGCer
from github_tracker_sync.labels import parse_label_declarations
from github_tracker_sync.syncer import Syncer
from github_tracker_sync.utils import RequestFailed, get_rate_limit


def required(value, flag):
    """Stop right away if a required setting is missing."""
    if not value:
        click.echo(f"must specify {flag}", err=True)
        sys.exit(1)


def split_commas(ctx, param, values):    # pylint: disable=unused-argument
    """Collect a repeatable, comma-separated option into a set."""
    names = set()
    for value in values:
        names.update(name for name in value.split(",") if name)
    return names


def log_remaining_requests(github, verdict):
    try:
        remaining = get_rate_limit(github)["remaining"]
    except RequestFailed:
        logger.warning("Couldn't get the GitHub rate limit", exc_info=True)
        remaining = "unknown"
    logger.info(f"{verdict}; remaining requests: {remaining}")


@click.command()
@click.option("--github-token", envvar="GITHUB_TOKEN", help="GitHub access token")
@click.option("--organization", envvar="GITHUB_ORGANIZATION", help="GitHub organization name")
@click.option("--tracker-token", envvar="TRACKER_TOKEN", help="Pivotal Tracker access token")
@click.option("--project-id", type=int, envvar="TRACKER_PROJECT_ID", help="Tracker project ID")
@click.option(
    "--repositories", multiple=True, callback=split_commas,
    help="Comma separated list of repositories to sync, can be provided more than once "
         "(default: all in provided organization)",
)
@click.option("--githuburl", envvar="GITHUB_API_URL", help="GitHub ENTERPRISE API URL")
@click.option(
    "--label", "labels", multiple=True, metavar="NAME:COLOR",
    help="An extra label every repo should have, can be provided more than once",
)
@click.option("--gc-labels", is_flag=True, help="Report Tracker labels that no story uses")
@click.option("--gc-delete-labels", is_flag=True, help="Really delete Tracker labels that no story uses")
@click.option("--dry-run", is_flag=True, help="Don't write to GitHub or Tracker, just log what would change")
def cli(
    github_token, organization, tracker_token, project_id, repositories,
    githuburl, labels, gc_labels, gc_delete_labels, dry_run,
):
    """
    Make sure every open GitHub issue has a Pivotal Tracker story, and keep
    the issue's comment, labels, and state in step with its stories.
    """
    required(tracker_token, "--tracker-token")
    required(github_token, "--github-token")
    required(project_id, "--project-id")
    required(organization, "--organization")

    try:
        additional_labels = parse_label_declarations(labels)
    except ValueError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)

    if os.environ.get("SENTRY_DSN", ""):
        sentry_sdk.init()

    github = get_github_session(github_token, base_url=githuburl)
    tracker = get_tracker_session(tracker_token)
    if dry_run:
        actions = DryRunFixingActions()
    else:
        actions = FixingActions(github, tracker, project_id)

    syncer = Syncer(
        github_session=github,
        tracker_session=tracker,
        project_id=project_id,
        organization=organization,
        repositories=repositories,
        additional_labels=additional_labels,
        actions=actions,
    )

    failed = False
    try:
        syncer.sync_issues_and_stories()
    except ExceptionGroup as group:
        # Each failure has already been logged as it happened.
        logger.error(f"{len(group.exceptions)} failures while syncing")
        failed = True
    except Exception:    # pylint: disable=broad-exception-caught
        logger.exception("Failed to sync")
        failed = True

    result = syncer.result()
    logger.info(
        f"Synced {len(result.synced_issues)} issues in {len(result.repos)} repos: "
        f"created {len(result.created_stories)} stories, closed {len(result.closed_issues)} issues"
    )

    if gc_labels or gc_delete_labels:
        LabelGCer(tracker, project_id, actions, delete=gc_delete_labels).gc()

    if dry_run:
        for name, kwargs in actions.action_calls:
            logger.info(f"Dry run: {name} {kwargs}")

    if failed:
        log_remaining_requests(github, "failed to sync")
        sys.exit(1)

    log_remaining_requests(github, "synced")


if __name__ == "__main__":
    cli()   # pylint: disable=no-value-for-parameter
