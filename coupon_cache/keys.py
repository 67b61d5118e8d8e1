from . import config
from .models import CouponStatus

# --- Key prefixes ---
USER_COUPON_USABLE_PREFIX = "user_coupon:usable:"
USER_COUPON_USED_PREFIX = "user_coupon:used:"
USER_COUPON_EXPIRED_PREFIX = "user_coupon:expired:"
COUPON_TEMPLATE_CODE_PREFIX = "coupon_template:codes:"

STATUS_PREFIXES = {
    CouponStatus.USABLE: USER_COUPON_USABLE_PREFIX,
    CouponStatus.USED: USER_COUPON_USED_PREFIX,
    CouponStatus.EXPIRED: USER_COUPON_EXPIRED_PREFIX,
}


def resolve(status, user_id, hash_tag=None):
    """
    Partition key for (status, user_id): prefix + user id. Raises InvalidStatus
    for unknown statuses.

    With `hash_tag` (default: config.HASH_TAG_USER_KEYS) the user id is wrapped
    in a cluster hash tag, `user_coupon:usable:{1001}`, so a user's partitions
    share one slot.
    """
    prefix = STATUS_PREFIXES[CouponStatus.of(status)]
    if hash_tag is None:
        hash_tag = config.HASH_TAG_USER_KEYS
    if hash_tag:
        return f"{prefix}{{{user_id}}}"
    return f"{prefix}{user_id}"


def pool_key(template_id):
    return f"{COUPON_TEMPLATE_CODE_PREFIX}{template_id}"
