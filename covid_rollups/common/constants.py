"""Application constants."""

USER_AGENT = "covid-rollups/1.0 (+research; contact: configured-email)"
STAGES = (
    "download",
    "process",
)
EXCLUDED_TERRITORIES = (
    "Northern Mariana Islands",
    "Guam",
    "Puerto Rico",
    "Virgin Islands",
    "American Samoa",
)
METRIC_ALIASES = {
    "cases": "cases_avg_per_100k",
    "deaths": "deaths_avg_per_100k",
}
DEFAULT_WEEK_START = "sunday"
RAW_FILENAME_TEMPLATE = "us-counties-{year}.csv"
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "year",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
