"""Constants for httping."""

from httping import __version__

# Run defaults (milliseconds)
DEFAULT_DELAY_MS = 1000
DEFAULT_TIMEOUT_MS = 5000

DEFAULT_USER_AGENT = f"httping/{__version__}"

# Reported in this order in the summary
PERCENTILES = (99, 95, 90, 75, 50)

# Column width of each value in a result line
FIELD_WIDTH = 9
