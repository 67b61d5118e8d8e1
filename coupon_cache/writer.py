import logging

from . import keys
from .batch import BestEffortBatch
from .models import CouponStatus
from .ttl import TTLJitterPolicy

logger = logging.getLogger(__name__)


class CouponCacheWriter:
    """Adds newly distributed coupons to a user's USABLE partition."""

    def __init__(self, client, ttl_policy=None):
        self.client = client
        self.ttl_policy = ttl_policy or TTLJitterPolicy()

    def add_usable(self, user_id, coupons):
        """
        New acquisitions only affect the USABLE cache, so nothing is checked
        against the other partitions. Returns the number of entries written.
        """
        if not coupons:
            return 0
        need_cached = {str(c.id): c.to_payload() for c in coupons}
        redis_key = keys.resolve(CouponStatus.USABLE, user_id)

        batch = BestEffortBatch(self.client, "add_usable")
        batch.put_all(redis_key, need_cached)
        batch.expire(redis_key, self.ttl_policy.next_ttl())
        batch.execute()

        logger.info("Add %d coupons to cache: user %s, key %s", len(coupons), user_id, redis_key)
        return len(coupons)
