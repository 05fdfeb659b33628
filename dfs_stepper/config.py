# ------------------------------
# Config (defaults; overridden per run by CLI flags)
# ------------------------------

# Auto-advance cadence, milliseconds between steps
DEFAULT_SPEED = 500
MIN_SPEED = 100
MAX_SPEED = 1000
SPEED_STEP = 100

DEFAULT_START_NODE = "A"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8050
