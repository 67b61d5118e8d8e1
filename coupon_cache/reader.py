import logging

from . import keys
from .batch import store_errors
from .exceptions import CorruptCacheEntry
from .guard import PenetrationGuard, SENTINEL_FIELD
from .models import Coupon, CouponStatus


logger = logging.getLogger(__name__)


def _text(value):
    return value.decode("utf-8") if isinstance(value, bytes) else value


class CouponCacheReader:
    """Reads one status partition of a user's coupons."""

    def __init__(self, client, guard=None):
        self.client = client
        self.guard = guard or PenetrationGuard(client)

    def read(self, user_id, status):
        """
        Returns the cached coupons for (user_id, status), possibly empty.

        A partition that does not exist at all is seeded with the sentinel
        before returning []; a partition holding only the sentinel is a
        verified-empty hit. One undecodable entry fails the whole read.
        """
        status = CouponStatus.of(status)
        redis_key = keys.resolve(status, user_id)
        logger.info("Get coupons from cache: user %s, status %s", user_id, status.name)

        with store_errors(f"read {redis_key}"):
            entries = self.client.hgetall(redis_key)

        if not entries:
            self.guard.seed_empty(user_id, [status])
            return []

        coupons = []
        for field, payload in entries.items():
            try:
                field = _text(field)
                if field == SENTINEL_FIELD:
                    continue
                coupons.append(Coupon.from_payload(_text(payload)))
            except (ValueError, KeyError, TypeError) as exc:
                raise CorruptCacheEntry(redis_key, field, exc) from exc
        return coupons
