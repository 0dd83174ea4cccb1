"""Settings for where the synchronizer should talk to."""

import os

# The GitHub API root. Point this at /api/v3 of a GitHub Enterprise install
# to sync there instead.
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")

# The Pivotal Tracker v5 API root.
TRACKER_API_URL = os.environ.get("TRACKER_API_URL", "https://www.pivotaltracker.com/services/v5")

# How many items to ask for on each page of a paginated listing.
GITHUB_PER_PAGE = int(os.environ.get("GITHUB_PER_PAGE", "100"))
TRACKER_PAGE_LIMIT = int(os.environ.get("TRACKER_PAGE_LIMIT", "100"))
