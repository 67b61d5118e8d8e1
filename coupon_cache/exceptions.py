"""Error kinds raised by the coupon cache layer."""


class CouponCacheError(Exception):
    """Base class for every error raised by the coupon cache layer."""


class InvalidStatus(CouponCacheError, ValueError):
    """An unrecognized coupon status reached key resolution."""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid coupon status: {status!r}")


class CorruptCacheEntry(CouponCacheError):
    """A cached payload could not be turned back into a Coupon."""

    def __init__(self, key, field, reason):
        self.key = key
        self.field = field
        super().__init__(f"Corrupt cache entry {key}[{field}]: {reason}")


class StaleCacheView(CouponCacheError):
    """
    The coupons a caller wants to move are not all in the cached USABLE partition.
    The caller should re-read USABLE and retry, or defer to the durable store.
    """

    def __init__(self, user_id, cached_ids, requested_ids):
        self.user_id = user_id
        self.cached_ids = set(cached_ids)
        self.requested_ids = set(requested_ids)
        missing = sorted(self.requested_ids - self.cached_ids)
        super().__init__(f"Coupons {missing} are not usable in cache for user {user_id}")


class StoreUnavailable(CouponCacheError):
    """The backing Redis store could not serve a call."""


class BatchPartiallyApplied(StoreUnavailable):
    """A non-transactional batch was delivered but some data commands failed."""

    def __init__(self, failures):
        # failures: list of (command description, exception)
        self.failures = failures
        detail = "; ".join(f"{name}: {exc}" for name, exc in failures)
        super().__init__(f"Batch partially applied: {detail}")
