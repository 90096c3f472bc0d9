"""broker-report-fixer — Turn paginated broker reports into clean Excel tables."""

__version__ = "0.2.0"

REPORT_PATTERN = "broker-report-*.xlsx"
OUTPUT_SUFFIX = "-fixed"
OUTPUT_DIR_NAME = "fixed"
