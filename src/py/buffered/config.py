from os import getenv
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

# Relative view paths are resolved against this directory
VIEW_ROOT: str = getenv("BUFFERED_VIEWS", ".")

LOG_COMMITS: bool = getenv("BUFFERED_LOG_COMMITS", "0") == "1"

# EOF
