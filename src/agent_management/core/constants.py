"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 1
DEFAULT_ACTIVITY_PAGE = 1
DEFAULT_ACTIVITY_LIMIT = 10
MAX_ACTIVITY_LIMIT = 100
MIN_PASSWORD_LENGTH = 6
# Admin(0) -> Manager(1) -> SalesStaff(2) -> TeamLeader/Agent(3)
MAX_HIERARCHY_DEPTH = 3

# Column widths in schema.sql.
NAME_MAX_LENGTH = 100
CODE_MAX_LENGTH = 50
LABEL_MAX_LENGTH = 150
LONG_TEXT_MAX_LENGTH = 255
FEE_MAX_DIGITS = 12
FEE_DECIMAL_PLACES = 2
