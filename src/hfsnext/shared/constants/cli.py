"""
CLI Constants
"""


class CLIDefaults:
    """Default values for the command-line interface."""

    APP_NAME = "hfsnext"
    VERSION = "0.1.0"
    TOKEN_ENV_VAR = "HFS_TOKEN"  # noqa: S105  # nosec B105 - env var name
    EXIT_MISSING_TOKEN = 2


class CLIHelp:
    """Help texts for the command-line interface."""

    APP_DESCRIPTION = "Fetch exam results from the HFS backend."
    VERSION_TEXT = "hfsnext v{version}"

    TOKEN_HELP = "HFS auth token (defaults to $HFS_TOKEN)"
    JSON_HELP = "Output results in JSON format"
    LOG_LEVEL_HELP = "Log level (DEBUG, INFO, WARNING, ERROR)"
    CONFIG_HELP = "Path to a TOML configuration file"

    EXAMS_HELP = "List all exams with scores, newest first"
    SNAPSHOT_HELP = "Show the user snapshot"
    OVERVIEW_HELP = "Show one exam's overview"
    OVERVIEW_V4_HELP = "Use the v4 overview (grade ranking)"
    LAST_EXAM_HELP = "Show the most recent exam's overview"
    RANK_HELP = "Show an exam's rank info"
    PAPER_RANK_HELP = "Show a paper's rank info"
    PICTURES_HELP = "List answer-sheet picture URLs of a paper"
    URL_HELP = "Resolve an operation's URL without calling the backend"

    MISSING_TOKEN = "No token given. Pass --token or set $HFS_TOKEN."
