import threading

import pytest

from coupon_cache import CouponCacheService, CouponStatus, InvalidStatus, StaleCacheView, UserLocks
from coupon_cache import keys


def ids(coupons):
    return {c.id for c in coupons}


def test_coupon_list_lifecycle(service, redis_client, coupon_factory):
    # A: never-written partition
    assert service.get_cached_coupons(1001, CouponStatus.USABLE) == []
    assert list(redis_client.hgetall(keys.resolve(CouponStatus.USABLE, 1001))) == ["-1"]
    assert service.get_cached_coupons(1001, CouponStatus.USABLE) == []

    # B: distribution
    assert service.add_coupons(1001, [coupon_factory(1), coupon_factory(2), coupon_factory(3)],
                               CouponStatus.USABLE) == 3
    assert ids(service.get_cached_coupons(1001, CouponStatus.USABLE)) == {1, 2, 3}

    # C: redemption
    assert service.add_coupons(1001, [coupon_factory(2)], CouponStatus.USED) == 1
    assert ids(service.get_cached_coupons(1001, CouponStatus.USABLE)) == {1, 3}
    assert ids(service.get_cached_coupons(1001, CouponStatus.USED)) == {2}

    # D: stale selection
    usable_before = redis_client.hgetall(keys.resolve(CouponStatus.USABLE, 1001))
    used_before = redis_client.hgetall(keys.resolve(CouponStatus.USED, 1001))
    with pytest.raises(StaleCacheView):
        service.add_coupons(1001, [coupon_factory(99)], CouponStatus.USED)
    assert redis_client.hgetall(keys.resolve(CouponStatus.USABLE, 1001)) == usable_before
    assert redis_client.hgetall(keys.resolve(CouponStatus.USED, 1001)) == used_before


def test_partitions_stay_disjoint(service, coupon_factory):
    service.add_usable(7, [coupon_factory(i, user_id=7) for i in range(1, 6)])
    service.transition(7, [coupon_factory(1, user_id=7), coupon_factory(2, user_id=7)], CouponStatus.USED)
    service.transition(7, [coupon_factory(4, user_id=7)], CouponStatus.EXPIRED)

    partitions = [ids(service.get_cached_coupons(7, s)) for s in CouponStatus]
    assert partitions == [{3, 5}, {1, 2}, {4}]
    assert set.union(*partitions) == {1, 2, 3, 4, 5}


def test_users_do_not_share_partitions(service, coupon_factory):
    service.add_usable(1, [coupon_factory(10, user_id=1)])
    assert service.get_cached_coupons(2, CouponStatus.USABLE) == []


def test_save_empty_coupon_list(service, redis_client):
    service.save_empty_coupon_list(55, list(CouponStatus))
    for status in CouponStatus:
        assert list(redis_client.hgetall(keys.resolve(status, 55))) == ["-1"]
        assert service.get_cached_coupons(55, status) == []


def test_add_coupons_rejects_unknown_status(service, coupon_factory):
    with pytest.raises(InvalidStatus):
        service.add_coupons(1001, [coupon_factory(1)], 0)


def test_acquire_coupon_code(service):
    service.pool.push(3, ["CODE-A"])
    assert service.acquire_coupon_code(3) == "CODE-A"
    assert service.acquire_coupon_code(3) is None


def test_user_locks_are_released_after_use():
    locks = UserLocks()
    for user_id in range(50000):
        with locks.for_user(user_id):
            assert len(locks) == 1
    assert len(locks) == 0


def test_user_lock_blocks_same_user_only():
    locks = UserLocks()
    entered = threading.Event()
    release = threading.Event()
    results = {}

    def hold():
        with locks.for_user(1):
            entered.set()
            release.wait(5)

    holder = threading.Thread(target=hold)
    holder.start()
    entered.wait(5)

    def try_user(user_id):
        with locks.for_user(user_id):
            results[user_id] = True

    other = threading.Thread(target=try_user, args=(2,))
    other.start()
    other.join(5)
    assert results == {2: True}

    same = threading.Thread(target=try_user, args=(1,))
    same.start()
    same.join(0.2)
    assert 1 not in results
    assert len(locks) == 1

    release.set()
    same.join(5)
    holder.join(5)
    assert results == {1: True, 2: True}
    assert len(locks) == 0


def test_service_keeps_given_user_locks(redis_client):
    locks = UserLocks()
    assert CouponCacheService(redis_client, user_locks=locks).user_locks is locks


def test_concurrent_redemptions_of_one_coupon_serialize(service, coupon_factory):
    service.add_usable(1001, [coupon_factory(1), coupon_factory(2)])
    outcomes = []

    def redeem(target):
        try:
            outcomes.append(service.transition(1001, [coupon_factory(1)], target))
        except StaleCacheView as exc:
            outcomes.append(exc)

    threads = [threading.Thread(target=redeem, args=(s,)) for s in (CouponStatus.USED, CouponStatus.EXPIRED)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(type(o).__name__ for o in outcomes) == ["StaleCacheView", "int"]
    used = ids(service.get_cached_coupons(1001, CouponStatus.USED))
    expired = ids(service.get_cached_coupons(1001, CouponStatus.EXPIRED))
    assert len(used & {1}) + len(expired & {1}) == 1
