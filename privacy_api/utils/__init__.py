"""Utility functions."""

from privacy_api.utils.time import epoch_now

__all__ = ["epoch_now"]
