import random

import fakeredis
import pytest

from coupon_cache import Coupon, CouponCacheService, TTLJitterPolicy


@pytest.fixture
def redis_client():
    client = fakeredis.FakeStrictRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def ttl_policy():
    return TTLJitterPolicy(1, 2, rng=random.Random(20240611))


@pytest.fixture
def service(redis_client, ttl_policy):
    return CouponCacheService(redis_client, ttl_policy=ttl_policy)


def make_coupon(coupon_id, template_id=10, user_id=1001):
    return Coupon(
        id=coupon_id,
        template_id=template_id,
        user_id=user_id,
        coupon_code=f"CODE-{coupon_id}",
        assign_time="2024-06-11T10:00:00",
        template={"rule": "lijian", "quota": 5},
    )


@pytest.fixture
def coupon_factory():
    return make_coupon
