# Entrius 2025
# =============================================================================
# GitHub API
# =============================================================================
BASE_GITHUB_API_URL = "https://api.github.com"
GITHUB_DOMAIN = "https://github.com"
GITHUB_API_TIMEOUT = 30  # seconds
GITHUB_PAGE_SIZE = 100

# =============================================================================
# TEP repository
# =============================================================================
TEPS_OWNER = "tektoncd"
TEPS_REPO = "community"
TEPS_BRANCH = "main"
TEPS_DIRECTORY = "teps"
TEPS_README = "README.md"

# Owner of the repositories whose PRs get commented on
PR_OWNER = "tektoncd"

# =============================================================================
# Bot identity & labels
# =============================================================================
BOT_USER = "tekton-robot"
TRACKING_ISSUE_LABEL = "tep-tracking"
STATUS_LABEL_PREFIX = "tep-status/"
TRACKING_ISSUE_TITLE_SUFFIX = "Tracking Issue"

# =============================================================================
# Rate limits
# =============================================================================
RATE_LIMIT_MIN_REMAINING = 10  # Warn below this many remaining requests
