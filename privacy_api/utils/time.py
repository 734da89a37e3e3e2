"""Time utilities."""

import time


def epoch_now() -> int:
    """Get the current time as integer epoch seconds."""
    return int(time.time())
