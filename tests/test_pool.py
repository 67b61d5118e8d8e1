from unittest import mock

import fakeredis
import pytest
import redis

from coupon_cache import CouponCodePool, StoreUnavailable


def test_acquire_pops_each_code_once(redis_client):
    pool = CouponCodePool(redis_client)
    assert pool.push(12, ["A1", "B2", "C3"]) == 3

    acquired = {pool.acquire(12) for _ in range(3)}

    assert acquired == {"A1", "B2", "C3"}
    assert pool.size(12) == 0


def test_acquire_from_empty_pool_is_not_available(redis_client):
    pool = CouponCodePool(redis_client)
    assert pool.acquire(404) is None
    pool.push(404, ["ONLY"])
    assert pool.acquire(404) == "ONLY"
    assert pool.acquire(404) is None


def test_pools_are_per_template(redis_client):
    pool = CouponCodePool(redis_client)
    pool.push(1, ["X"])
    pool.push(2, ["Y"])
    assert pool.acquire(2) == "Y"
    assert pool.size(1) == 1


def test_push_nothing_reports_size(redis_client):
    pool = CouponCodePool(redis_client)
    pool.push(5, ["Q"])
    assert pool.push(5, []) == 1


def test_acquire_decodes_bytes():
    pool = CouponCodePool(fakeredis.FakeStrictRedis(server=fakeredis.FakeServer()))
    pool.push(3, ["RAW"])
    assert pool.acquire(3) == "RAW"


def test_acquire_store_failure():
    client = mock.Mock()
    client.rpop.side_effect = redis.exceptions.ConnectionError("down")
    with pytest.raises(StoreUnavailable):
        CouponCodePool(client).acquire(1)
