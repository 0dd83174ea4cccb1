"""Made-up settings to use during tests."""

# These should be in the in-memory form ready to patch into github_tracker_sync.settings

GITHUB_API_URL = "https://api.github.com"
TRACKER_API_URL = "https://www.pivotaltracker.com/services/v5"
GITHUB_PER_PAGE = 100
# Small, so that Tracker pagination gets exercised.
TRACKER_PAGE_LIMIT = 2
