# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See src/things3_query/config.py for parsing and defaults.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "THINGS3_APP_NAME": "App display name (default: things3-query).",
    "THINGS3_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "THINGS3_DATA_DIR": "Local directory for the log file (default: .local/things3-query).",
    # Host database
    "THINGS3_DB_PATH": "Explicit path to Things' main.sqlite. Skips discovery when set.",
    "THINGS3_CONTAINER_DIR": (
        "Group container searched for ThingsData-*/Things Database.thingsdatabase/main.sqlite "
        "(default: ~/Library/Group Containers/JLMPQHK86H.com.culturedcode.ThingsMac)."
    ),
    # Host conventions
    "THINGS3_DATE_OFFSET_DAYS": (
        "Day shift applied by the packed-date codec (default: 0). "
        "Some host builds appear to use 33; check against your own data first."
    ),
    "THINGS3_SOMEDAY_AREA": "Title of the area treated as the Someday list (default: Someday).",
    # Output / limits
    "THINGS3_JSON_OUTPUT": "Start the console with JSON output (true/false, default: false).",
    "THINGS3_SEARCH_LIMIT": "Maximum number of tasks returned by /search (default: 200).",
}
