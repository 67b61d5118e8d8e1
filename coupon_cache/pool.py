import logging

from . import keys
from .batch import store_errors

logger = logging.getLogger(__name__)


class CouponCodePool:
    """
    Per-template list of unissued coupon codes.

    Codes are interchangeable, so no ordering is promised: acquire pops from
    the tail. acquire() returns None when the pool is empty; callers then fall
    back to the durable store or reject the acquisition.
    """

    def __init__(self, client):
        self.client = client

    def acquire(self, template_id):
        redis_key = keys.pool_key(template_id)
        with store_errors(f"acquire {redis_key}"):
            code = self.client.rpop(redis_key)
        if isinstance(code, bytes):
            code = code.decode("utf-8")
        logger.info("Acquire coupon code: template %s, key %s, code %s", template_id, redis_key, code)
        return code

    def push(self, template_id, codes):
        """Adds codes to the template's pool; returns the pool size afterwards."""
        codes = list(codes)
        redis_key = keys.pool_key(template_id)
        if not codes:
            return self.size(template_id)
        with store_errors(f"push {redis_key}"):
            size = self.client.rpush(redis_key, *codes)
        logger.info("Pushed %d coupon codes into %s", len(codes), redis_key)
        return size

    def size(self, template_id):
        redis_key = keys.pool_key(template_id)
        with store_errors(f"size {redis_key}"):
            return self.client.llen(redis_key)
