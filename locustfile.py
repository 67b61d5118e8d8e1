import os
import random
import time
import datetime

import redis
from bson import ObjectId
from locust import User, task, between, events

from coupon_cache import Coupon, CouponCacheError, CouponCacheService, CouponStatus
from coupon_cache.config import get_client

# --- Configuration ---
TEMPLATE_IDS = [int(t) for t in os.environ.get("COUPON_TEMPLATE_IDS", "1,2,3").split(",")]
USER_ID_SPACE = int(os.environ.get("COUPON_USER_ID_SPACE", 100000))


@events.init_command_line_parser.add_listener
def add_custom_arguments(parser):
    """Adds command-line arguments to control the test run."""
    parser.add_argument(
        "--coupons-per-user", type=int, env_var="LOCUST_COUPONS_PER_USER", default=5,
        help="Coupons distributed to a simulated user before it starts redeeming."
    )
    parser.add_argument(
        "--redeem-batch", type=int, env_var="LOCUST_REDEEM_BATCH", default=1,
        help="Coupons moved to USED per redeem task."
    )


class CouponCacheUser(User):
    """
    Simulates one shopper: distribution fills USABLE, the coupon list page reads
    every partition, checkout moves coupons to USED.
    """
    wait_time = between(0.01, 0.05)

    def on_start(self):
        """Called once per user. Connects to Redis and picks a user id."""
        try:
            self.client = get_client()
            self.client.ping()
        except redis.exceptions.ConnectionError as e:
            print(f"Fatal: Could not connect to Redis. Aborting test. Error: {e}")
            self.environment.runner.quit()
            return

        self.service = CouponCacheService(self.client)
        self.user_id = random.randint(1, USER_ID_SPACE)
        self.next_coupon_id = self.user_id * 1000

    def _fire(self, name, start_time, response_length=0, exception=None):
        total_time = int((time.time() - start_time) * 1000)
        events.request.fire(
            request_type="redis", name=name, response_time=total_time,
            response_length=response_length, exception=exception, context={"user_id": self.user_id}
        )

    def _new_coupon(self, template_id):
        self.next_coupon_id += 1
        code = self.service.acquire_coupon_code(template_id) or str(ObjectId())
        return Coupon(
            id=self.next_coupon_id,
            template_id=template_id,
            user_id=self.user_id,
            coupon_code=code,
            assign_time=datetime.datetime.now().isoformat(),
        )

    @task(3)
    def read_coupons_task(self):
        start_time = time.time()
        try:
            total = 0
            for status in CouponStatus:
                total += len(self.service.get_cached_coupons(self.user_id, status))
            self._fire("cache:read_all_partitions", start_time, response_length=total)
        except CouponCacheError as e:
            self._fire("cache:read_all_partitions", start_time, exception=e)

    @task(2)
    def distribute_task(self):
        n = self.environment.parsed_options.coupons_per_user
        start_time = time.time()
        try:
            coupons = [self._new_coupon(random.choice(TEMPLATE_IDS)) for _ in range(n)]
            written = self.service.add_coupons(self.user_id, coupons, CouponStatus.USABLE)
            self._fire("cache:add_usable", start_time, response_length=written)
        except CouponCacheError as e:
            self._fire("cache:add_usable", start_time, exception=e)

    @task(1)
    def redeem_task(self):
        batch = self.environment.parsed_options.redeem_batch
        start_time = time.time()
        try:
            usable = self.service.get_cached_coupons(self.user_id, CouponStatus.USABLE)
            if not usable:
                self._fire("cache:transition_used", start_time)
                return
            selected = random.sample(usable, k=min(batch, len(usable)))
            moved = self.service.add_coupons(self.user_id, selected, CouponStatus.USED)
            self._fire("cache:transition_used", start_time, response_length=moved)
        except CouponCacheError as e:
            # StaleCacheView when another simulated user drew the same user id
            self._fire("cache:transition_used", start_time, exception=e)
            # locust -f locustfile.py --coupons-per-user 5 --redeem-batch 1
