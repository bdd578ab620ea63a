"""
Configuration constants and settings
Centralizes hardcoded values for easier maintenance

This file holds the plumbing configuration for the ARA detector: market-data API,
concurrency, file paths and logging. Detector thresholds and the signal weight
table live in ara_config.py.
"""
from pathlib import Path

# ============================================================================
# API CONFIGURATION
# ============================================================================

STOCKBIT_BASE_URL = "https://exodus.stockbit.com"
# Purpose: Base URL of the market-data API (orderbook, market detector, historical summary)
# Used by: StockbitClient

STOCKBIT_TOKEN_ENV = "STOCKBIT_TOKEN"
# Purpose: Name of the environment variable holding the bearer token
# Used by: StockbitClient, scripts (loaded from .env)

DEFAULT_RATE_LIMIT_DELAY = 0.3  # seconds between API calls
# Purpose: Prevents overwhelming the data provider with too many requests
# Used by: StockbitClient
# Why important: A batch scan issues 4 reads per emiten; without spacing the API throttles us

MAX_API_RETRIES = 3
# Purpose: Maximum number of attempts for a failed API call
# Used by: StockbitClient
# Why important: Handles temporary network issues without infinite loops

STOCKBIT_API_TIMEOUT = 20  # seconds
# Purpose: Maximum time to wait for a market-data response
# Used by: StockbitClient

# ============================================================================
# SCAN CONFIGURATION
# ============================================================================

SOURCE_FETCH_WORKERS = 4
# Purpose: Threads used to fetch the sources of ONE emiten concurrently
# Used by: fetch_utils.fetch_sources

BATCH_SCAN_WORKERS = 4
# Purpose: Emiten evaluated in parallel during a watchlist scan
# Used by: ARADetector.evaluate_batch
# Why important: Total in-flight requests = BATCH_SCAN_WORKERS * SOURCE_FETCH_WORKERS

HISTORICAL_LOOKBACK_CALENDAR_DAYS = 15
# Purpose: Start of the historical summary window (scan date minus N calendar days)
# Used by: fetch_utils.fetch_sources

HISTORICAL_SESSION_LIMIT = 10
# Purpose: Number of trailing sessions requested from the historical summary
# Used by: fetch_utils.fetch_sources

WATCHLIST_PAGE_LIMIT = 500
# Purpose: Page size when reading the account watchlist from the API
# Used by: StockbitClient.get_watchlist

DEFAULT_RESULTS_LIMIT = 200
# Purpose: Default number of stored results returned by a query
# Used by: 03_show_results.py

# ============================================================================
# FILE PATH CONFIGURATION
# ============================================================================

DEFAULT_ENV_PATH = ".env"
# Purpose: Path to environment variables file
# Used by: All scripts that need the API token

DEFAULT_LOG_DIR = "logs"
# Purpose: Directory where log files are stored
# Used by: logger_config

DEFAULT_LOG_FILE = "ara_detector.log"
# Purpose: Default log file name
# Used by: logger_config

DATA_DIR = Path("data")

ARA_RESULTS_FILE = DATA_DIR / "ara_detector_results.json"
# Purpose: Results store, keyed by scan date then emiten (upsert per scan)
# Used by: ara_store.py

FAILED_SCAN_LIST = DATA_DIR / "failed_scan.txt"
# Purpose: Emiten that failed in the latest scan (one per line)
# Used by: list_failed_scans.py

DEFAULT_WATCHLIST_FILE = "watchlist.txt"
# Purpose: Local watchlist used when --watchlist is given without a path
# Used by: 01_scan_watchlist.py

REPORTS_DIR = Path("reports")
# Purpose: Output directory for text reports and CSV exports
# Used by: 01_scan_watchlist.py, ara_report.py

ARA_REPORT_PREFIX = "ara_scan_report_"
ARA_CSV_PREFIX = "ara_scan_summary_"

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Purpose: Format string for log messages
# Used by: logger_config

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# Purpose: Date/time format in log messages
# Used by: logger_config

LOG_MAX_BYTES = 10 * 1024 * 1024  # 10MB
# Purpose: Maximum size of a single log file before rotation
# Used by: RotatingFileHandler

LOG_BACKUP_COUNT = 5
# Purpose: Number of backup log files to keep
# Used by: RotatingFileHandler

# ============================================================================
# INPUT VALIDATION CONFIGURATION
# ============================================================================

MAX_TICKER_LENGTH = 12
# Purpose: Maximum allowed length for an emiten code
# Used by: ticker_utils.is_valid_ticker

ALLOWED_TICKER_CHARS = set("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-")
# Purpose: Valid characters in an emiten code (IDX codes are letters, rights/warrants carry -R/-W)
# Used by: ticker_utils.is_valid_ticker

EXCHANGE_SUFFIXES = (".JK",)
# Purpose: Exchange suffixes stripped from watchlist symbols (Yahoo-style BBRI.JK -> BBRI)
# Used by: ticker_utils.clean_ticker

# ============================================================================
# SECURITY CONFIGURATION
# ============================================================================

MASKED_CREDENTIAL_LENGTH = 4  # Show last 4 chars when masking
# Purpose: Number of characters to show when masking the token in logs
# Used by: ticker_utils.mask_credential
