import random

from . import config

SECONDS_PER_HOUR = 60 * 60


def jitter(min_hours, max_hours, rng=random):
    """
    Random expiration in seconds, uniform over [min_hours*3600, max_hours*3600]
    inclusive. Re-drawn on every write so keys of different users never expire
    together (cache avalanche).
    """
    if min_hours < 0 or max_hours < min_hours:
        raise ValueError(f"Invalid TTL bound: [{min_hours}, {max_hours}] hours")
    low = int(min_hours * SECONDS_PER_HOUR)
    high = int(max_hours * SECONDS_PER_HOUR)
    return rng.randint(low, high)


class TTLJitterPolicy:
    """Holds the configured bound; pass a seeded random.Random for reproducible draws."""

    def __init__(self, min_hours=None, max_hours=None, rng=None):
        self.min_hours = config.CACHE_TTL_MIN_HOURS if min_hours is None else min_hours
        self.max_hours = config.CACHE_TTL_MAX_HOURS if max_hours is None else max_hours
        if self.min_hours < 0 or self.max_hours < self.min_hours:
            raise ValueError(f"Invalid TTL bound: [{self.min_hours}, {self.max_hours}] hours")
        self.rng = rng or random.Random()

    @property
    def bounds(self):
        """(min, max) in seconds."""
        return int(self.min_hours * SECONDS_PER_HOUR), int(self.max_hours * SECONDS_PER_HOUR)

    def next_ttl(self):
        return jitter(self.min_hours, self.max_hours, rng=self.rng)
