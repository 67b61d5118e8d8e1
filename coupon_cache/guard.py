import logging

from . import keys
from .batch import BestEffortBatch
from .models import Coupon, CouponStatus, INVALID_COUPON_ID
from .ttl import TTLJitterPolicy

logger = logging.getLogger(__name__)

SENTINEL_FIELD = str(INVALID_COUPON_ID)


class PenetrationGuard:
    """
    Marks partitions as "checked and empty" by writing the invalid coupon under
    the reserved field "-1", so repeated misses stop reaching the durable store.

    The write is a merge (HSET of one reserved field): real coupon entries
    already in the partition are left untouched.
    """

    def __init__(self, client, ttl_policy=None):
        self.client = client
        self.ttl_policy = ttl_policy or TTLJitterPolicy()
        self._sentinel = {SENTINEL_FIELD: Coupon.invalid_coupon().to_payload()}

    def seed_empty(self, user_id, statuses):
        statuses = sorted({CouponStatus.of(s) for s in statuses})
        if not statuses:
            return
        logger.info("Save empty coupon list to cache for user %s, statuses %s",
                    user_id, [s.name for s in statuses])

        batch = BestEffortBatch(self.client, "seed_empty")
        for status in statuses:
            redis_key = keys.resolve(status, user_id)
            batch.put_all(redis_key, self._sentinel)
            batch.expire(redis_key, self.ttl_policy.next_ttl())
        batch.execute()
