from .common import random_token, utc_timestamp

__all__ = ["utc_timestamp", "random_token"]
