import logging

from . import keys
from .batch import BestEffortBatch
from .exceptions import InvalidStatus, StaleCacheView
from .models import CouponStatus
from .reader import CouponCacheReader
from .ttl import TTLJitterPolicy

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (CouponStatus.USED, CouponStatus.EXPIRED)


class StateTransitionCoordinator:
    """
    Moves coupons out of a user's USABLE partition into USED or EXPIRED.

    The input is validated against the cache's own USABLE view, not the
    durable store. Concurrent transitions for one user are NOT serialized
    here: callers must hold a per-user lock (see service.UserLocks).
    """

    def __init__(self, client, reader=None, ttl_policy=None):
        self.client = client
        self.reader = reader or CouponCacheReader(client)
        self.ttl_policy = ttl_policy or TTLJitterPolicy()

    def transition(self, user_id, coupons, target_status):
        target_status = CouponStatus.of(target_status)
        if target_status not in TERMINAL_STATUSES:
            raise InvalidStatus(target_status)
        if not coupons:
            return 0

        # --- 1. Validate against the cached USABLE partition ---
        cur_usable_ids = {c.id for c in self.reader.read(user_id, CouponStatus.USABLE)}
        param_ids = {c.id for c in coupons}
        if not param_ids <= cur_usable_ids:
            logger.error("Coupons not equal to cache: user %s, cached %s, requested %s",
                         user_id, sorted(cur_usable_ids), sorted(param_ids))
            raise StaleCacheView(user_id, cur_usable_ids, param_ids)

        # --- 2. One best-effort batch touching both keys ---
        usable_key = keys.resolve(CouponStatus.USABLE, user_id)
        target_key = keys.resolve(target_status, user_id)
        need_cached = {str(c.id): c.to_payload() for c in coupons}

        batch = BestEffortBatch(self.client, f"transition_to_{target_status.name.lower()}")
        batch.put_all(target_key, need_cached)
        batch.delete_fields(usable_key, list(need_cached))
        batch.expire(usable_key, self.ttl_policy.next_ttl())
        batch.expire(target_key, self.ttl_policy.next_ttl())
        batch.execute()

        logger.info("Moved %d coupons USABLE -> %s for user %s",
                    len(coupons), target_status.name, user_id)
        return len(coupons)
