"""Application constants."""

USER_AGENT = "permit-hub/0.3 (+building-permit lookup; contact: configured-email)"
DEFAULT_BASE_URL = "https://apis.data.go.kr/1613000/ArchPmsHubService"
SUCCESS_RESULT_CODE = "00"
AUTH_RESULT_CODES = ("30", "31")
NORMAL_AUTH_MESSAGE = "NORMAL_SERVICE"
UNREGISTERED_KEY_MESSAGE = "SERVICE_KEY_IS_NOT_REGISTERED_ERROR"
PLACEHOLDER_SERVICE_KEY = "demo-key"
MIN_CREDENTIAL_LENGTH = 10
CREDENTIAL_PROBE_SIGUNGU = "11110"

DEFAULT_PAGE_SIZE = 100
DEFAULT_PAGE_INDEX = 1
SIMULATED_RECORD_COUNT = 8
DISTRICT_DELAY_SEC = 0.2

UNKNOWN_REGION_LABEL = "지역명 없음"
UNKNOWN_SUB_REGION_LABEL = "동명 없음"

CREDENTIAL_ENV_VAR = "PUBLIC_DATA_API_KEY"
STORE_KEY_CREDENTIAL = "PUBLIC_DATA_API_KEY"
STORE_KEY_TARGETS = "TARGET_PROJECTS"

EXIT_SUCCESS = 0
EXIT_USAGE = 2
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "service",
    "region",
    "event",
    "status",
    "provenance",
    "attempt",
    "duration_ms",
    "rows_out",
    "error_code",
    "message",
)
