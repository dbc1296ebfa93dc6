"""Constants shared by the Jira client mixins."""

# Issues fetched per search request
DEFAULT_PAGE_SIZE = 100

# Upper bound of parallel requests in create/transition batches
MAX_BATCH_WORKERS = 8

SPRINT_STATES = "active,future"

EPIC_ISSUE_TYPE = "Epic"
INITIATIVE_ISSUE_TYPE = "Initiative"
BUG_ISSUE_TYPE = "Bug"
CLOSED_STATUS = "Closed"

DEFAULT_SEARCH_FIELDS = ("summary", "priority", "status")
