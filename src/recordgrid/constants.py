"""
Centralized constants for RecordGrid.

Eliminates magic names and numbers scattered across the codebase.
Import from here instead of hardcoding values.
"""

# ===========================================================================
# Synthetic column names
# ===========================================================================
SEQUENCE_COLUMN = "#no"         # Row counter, numbered by the sink
ID_COLUMN = "#id"               # Record identity
RECORD_COLUMN = "#record"       # Originating record, never rendered

SYNTHETIC_COLUMNS = (SEQUENCE_COLUMN, ID_COLUMN, RECORD_COLUMN)

# Display position of the first ordered column (after #no and #id)
FIRST_ORDERED_POSITION = 2

# ===========================================================================
# Date-time formatting
# ===========================================================================
# "%3f" is a millisecond token understood by value_format.format_datetime
DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
MILLISECOND_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%3f"

# ===========================================================================
# Layout description
# ===========================================================================
LAYOUT_ROOT_TAG = "grid"
LAYOUT_ROW_TAG = "row"
LAYOUT_CELL_TAG = "cell"

# ===========================================================================
# Metadata cache
# ===========================================================================
METADATA_CACHE_TTL_S = 300
METADATA_CACHE_MAXSIZE = 1024

# ===========================================================================
# UI sizes (pixels)
# ===========================================================================
DEFAULT_ROW_HEIGHT = 16
MAX_COLUMN_WIDTH = 300
DEFAULT_COLUMN_WIDTH = 100
TOOLTIP_MIN_LENGTH = 50

# Skip auto-resizing for large results
AUTOSIZE_ROW_LIMIT = 10_000
