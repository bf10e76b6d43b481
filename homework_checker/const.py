"""Constants for the homework checker."""

GRAPH_BASE_URL = "https://graph.microsoft.com/beta"

# Graph accepts at most 20 requests per $batch call
BATCH_SIZE = 20
# No pagination is followed for assignments
PAGE_SIZE = 999

ASSIGNMENT_STATUS = "assigned"
ASSIGNMENT_FIELDS = ["displayName", "instructions", "dueDateTime"]
CLASS_FIELDS = ["id", "externalName"]

# Status codes
HTTP_OK = 200
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVICE_UNAVAILABLE = 503
THROTTLE_STATUSES = (HTTP_TOO_MANY_REQUESTS, HTTP_SERVICE_UNAVAILABLE)

# Seconds to wait when a throttled response carries no Retry-After header
DEFAULT_RETRY_AFTER = 5

# Instructions
MAX_INSTRUCTIONS_LENGTH = 200
TRUNCATED_INSTRUCTIONS_LENGTH = 197
ELLIPSIS = "..."

# Year groups that have left by the summer term
SUMMER_MONTHS = (6, 7)
SUMMER_LEAVER_YEARS = (11, 13)

# Key-stage bands
KEY_STAGE_3 = "ks3"
KEY_STAGE_4 = "ks4"
KEY_STAGE_5 = "ks5"

# Configuration
ENV_ACCESS_TOKEN = "GRAPH_ACCESS_TOKEN"
ENV_CONFIG_DIR = "HOMEWORK_CONFIG_DIR"
ENV_TODAY = "HOMEWORK_TODAY"
ENV_LOG_LEVEL = "HOMEWORK_LOG_LEVEL"
DEFAULT_CONFIG_DIR = "config"

SETTINGS_SUFFIX = "-settings.json"
CLASSES_SUFFIX = "-classes.csv"
DAYS_SUFFIX = "-days.csv"
DEPARTMENTS_SUFFIX = "-departments.csv"
TEACHERS_SUFFIX = "-teachers.csv"
