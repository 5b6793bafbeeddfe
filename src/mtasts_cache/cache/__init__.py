"""The MTA-STS policy cache."""
from mtasts_cache.cache.policy_cache import DEFAULT_REFRESH_LOOKAHEAD, PolicyCache

__all__ = [
    "DEFAULT_REFRESH_LOOKAHEAD",
    "PolicyCache",
]
