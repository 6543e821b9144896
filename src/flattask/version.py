VERSION = "0.1.0"

# Bumped whenever the on-disk record layout changes.
RECORD_FORMAT_VERSION = 1
