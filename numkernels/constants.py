# -------------------------
# Shared defaults
# -------------------------
# Suggested cap for callers opting into bounded Newton iteration.
DEFAULT_MAX_ITER = 10_000

# strftime pattern, e.g. "31 May 2001 09:45:54 AM"
TIMESTAMP_FORMAT = "%d %B %Y %I:%M:%S %p"
