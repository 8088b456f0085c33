"""wellbook — Split yearly well-measurement workbooks into per-well reports."""

__version__ = "0.2.0"

NAME_COLUMN = "@Name( )"
DATE_COLUMN = "Date"
LIQUID_RATE_COLUMN = "PdLiq"
OIL_RATE_COLUMN = "PdOil"
# Leading letter is CYRILLIC CAPITAL LETTER TE (U+0422), not a Latin "T".
TEMPERATURE_COLUMN = "Тemperature"

EXPORT_COLUMNS: list[str] = [
    NAME_COLUMN,
    DATE_COLUMN,
    LIQUID_RATE_COLUMN,
    OIL_RATE_COLUMN,
    TEMPERATURE_COLUMN,
]

MAX_SHEET_NAME_LENGTH = 30
FORBIDDEN_SHEET_CHARS = "/\\?*[]"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
PROGRESS_BATCH_ROWS = 5000
