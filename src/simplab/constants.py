"""Fixed constants shared across SimpLab."""

NEUTRAL_COLOR = "#E8F4F8"

# Standard conditions reported to external analysis services.
STANDARD_TEMPERATURE_K = 298.0
STANDARD_PRESSURE_ATM = 1.0

NEUTRAL_PH = 7.0
PH_MIN = 0.0
PH_MAX = 14.0

DEFAULT_MAX_SUBSTANCES = 5
DEFAULT_MAX_CONTAINERS = 4
DEFAULT_CONTAINER_PREFIX = "beaker"

# Fill level as a fraction of the container height.
EMPTY_FILL_LEVEL = 0.5
BASE_FILL_LEVEL = 0.3
FILL_INCREMENT = 0.1
MAX_FILL_LEVEL = 0.8
