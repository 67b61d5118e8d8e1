"""Per-user coupon cache backed by Redis: status partitions, sentinel seeding, TTL jitter and transitions."""
from .exceptions import (
    CouponCacheError,
    InvalidStatus,
    CorruptCacheEntry,
    StaleCacheView,
    StoreUnavailable,
    BatchPartiallyApplied,
)
from .models import Coupon, CouponStatus, INVALID_COUPON_ID
from .guard import PenetrationGuard
from .pool import CouponCodePool
from .reader import CouponCacheReader
from .service import CouponCacheService, UserLocks
from .settlement import (
    CouponAndTemplate,
    GoodsInfo,
    RuleFlag,
    SettlementInfo,
    compute_rule,
)
from .transition import StateTransitionCoordinator
from .ttl import TTLJitterPolicy, jitter
from .writer import CouponCacheWriter

__all__ = [
    'CouponCacheError',
    'InvalidStatus',
    'CorruptCacheEntry',
    'StaleCacheView',
    'StoreUnavailable',
    'BatchPartiallyApplied',
    'Coupon',
    'CouponStatus',
    'INVALID_COUPON_ID',
    'PenetrationGuard',
    'CouponCodePool',
    'CouponCacheReader',
    'CouponCacheService',
    'UserLocks',
    'CouponAndTemplate',
    'GoodsInfo',
    'RuleFlag',
    'SettlementInfo',
    'compute_rule',
    'StateTransitionCoordinator',
    'TTLJitterPolicy',
    'jitter',
    'CouponCacheWriter',
]
