import logging
import threading
from contextlib import contextmanager

from .guard import PenetrationGuard
from .models import CouponStatus
from .pool import CouponCodePool
from .reader import CouponCacheReader
from .transition import StateTransitionCoordinator
from .ttl import TTLJitterPolicy
from .writer import CouponCacheWriter

logger = logging.getLogger(__name__)


class UserLocks:
    """
    In-process lock per user id. It serializes mutating calls for one user
    inside this process only; separate service instances are not coordinated.

    A user's lock is reference counted and dropped once no caller holds or
    waits on it, so the map only holds users with calls in flight.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # user_id -> [lock, number of callers holding or waiting]
        self._locks = {}

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def for_user(self, user_id):
        with self._guard:
            entry = self._locks.setdefault(user_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[user_id]


class CouponCacheService:
    """Entry point used by the API layer: wires every cache component to one client."""

    def __init__(self, client, ttl_policy=None, user_locks=None):
        self.client = client
        self.ttl_policy = ttl_policy or TTLJitterPolicy()
        self.user_locks = user_locks if user_locks is not None else UserLocks()

        self.guard = PenetrationGuard(client, self.ttl_policy)
        self.reader = CouponCacheReader(client, self.guard)
        self.writer = CouponCacheWriter(client, self.ttl_policy)
        self.coordinator = StateTransitionCoordinator(client, self.reader, self.ttl_policy)
        self.pool = CouponCodePool(client)

    def get_cached_coupons(self, user_id, status):
        return self.reader.read(user_id, status)

    def save_empty_coupon_list(self, user_id, statuses):
        """Pre-seed partitions after confirming the user has no coupons in the durable store."""
        self.guard.seed_empty(user_id, statuses)

    def acquire_coupon_code(self, template_id):
        return self.pool.acquire(template_id)

    def add_usable(self, user_id, coupons):
        with self.user_locks.for_user(user_id):
            return self.writer.add_usable(user_id, coupons)

    def transition(self, user_id, coupons, target_status):
        with self.user_locks.for_user(user_id):
            return self.coordinator.transition(user_id, coupons, target_status)

    def add_coupons(self, user_id, coupons, status):
        """
        USABLE means newly acquired coupons; USED and EXPIRED move coupons out
        of USABLE. Returns the number of coupons written or moved.
        """
        status = CouponStatus.of(status)
        logger.info("Add coupons to cache: user %s, %d coupons, status %s",
                    user_id, len(coupons), status.name)
        if status == CouponStatus.USABLE:
            return self.add_usable(user_id, coupons)
        return self.transition(user_id, coupons, status)
