"""Centralized user-facing text for the indexdiff CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "indexdiff – compare Algolia indices replicated across two apps."
    HELP_COMPARE = (
        "Download index lists, fetch the indices whose size differs and "
        "report the ones with different content."
    )
    HELP_STALE = "List indices that have not been updated for a while."
    HELP_STALE_ACCOUNT = "Account whose index list is inspected (defaults to the source account)."
    HELP_STALE_DAYS = "Minimum age, in days, of the last update."
    HELP_CLEAR_CACHE = "Remove cached index lists and/or downloaded indices."
    HELP_CLEAR_LISTS = "Only remove cached index lists."
    HELP_CLEAR_INDICES = "Only remove downloaded index artifacts."

    ERROR_CREDENTIALS_MISSING = (
        "Credentials for account '{account}' are missing. "
        "Set {app_env} and {key_env} in the environment or in a .env file."
    )
    ERROR_ACCOUNT_UNKNOWN = "Unknown account '{account}'. Configured accounts: {allowed}."
    ERROR_ACCOUNTS_IDENTICAL = "Source and target accounts must differ (got '{account}' twice)."
    ERROR_CONFIG_JSON_INVALID = "Config payload must be a JSON object."
    ERROR_CONFIG_VALUE_INVALID = "Invalid config value for '{field}'."
    ERROR_CONFIG_FILE_INVALID = "Unable to read config file {path}: {reason}"
    ERROR_ALGOLIA_PREFIX = "Algolia request failed: "
    ERROR_CACHE_KEY_INVALID = "Cache key must be a relative path inside the cache: {key}"
    ERROR_MARKER = "ERROR: {message}"

    INFO_LIST_CACHED = "List of indices for {account} found in cache."
    INFO_LIST_SAVED = "Saving list of indices for {account} to cache."
    INFO_DIVERGENT_FOUND = "Found {count} indices whose size does not match."
    INFO_DOWNLOADING = "Downloading those indices to disk..."
    INFO_DOWNLOAD_DONE = "All {count} indices downloaded on both apps."
    INFO_DOWNLOAD_FAILURES = "{count} download(s) failed; error markers were written to the cache."
    INFO_REPORT_TITLE = "The following indices have different content on {source} and {target}:"
    INFO_REPORT_EMPTY = "No index has different content on {source} and {target}."
    INFO_STALE_TITLE = "Indices of {account} not updated in the past {days} days:"
    INFO_STALE_EMPTY = "Every index of {account} was updated in the past {days} days."
    INFO_CACHE_CLEARED = "Removed {count} cached file{plural} from {path}."

    PROGRESS_UNIT = "\\[{account}] {index}"
    PROGRESS_UNIT_FAILED = "\\[{account}] [red]{index}[/red] ({error})"

    TABLE_HEADER_INDEX = "Index"
    TABLE_HEADER_RECORDS = "Records"
    TABLE_HEADER_LAST_UPDATE = "Last update"
