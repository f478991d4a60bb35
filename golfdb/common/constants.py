"""Application constants."""

USER_AGENT = "golfdb-uk/1.0 (+static directory builder; contact: configured-email)"
STAGES = (
    "harvest",
    "build",
    "purify",
)
NATIONS = ("england", "scotland", "wales", "northern_ireland")
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "source",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
