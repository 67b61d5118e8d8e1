import os

import redis
from redis.cluster import RedisCluster, ClusterNode

# --- Configuration ---
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", 6379))
REDIS_DB = int(os.environ.get("REDIS_DB", 0))
REDIS_CLUSTER = os.environ.get("REDIS_CLUSTER", "false").lower() in ("1", "true", "yes")
# Wrap user ids of partition keys in a cluster hash tag (opt-in, changes the key format)
HASH_TAG_USER_KEYS = os.environ.get("COUPON_CACHE_HASH_TAG_KEYS", "false").lower() in ("1", "true", "yes")

# Bounds (hours) for the randomized expiration of every partition key
CACHE_TTL_MIN_HOURS = int(os.environ.get("COUPON_CACHE_TTL_MIN_HOURS", 1))
CACHE_TTL_MAX_HOURS = int(os.environ.get("COUPON_CACHE_TTL_MAX_HOURS", 2))


def get_client(host=REDIS_HOST, port=REDIS_PORT, db=REDIS_DB, cluster=REDIS_CLUSTER):
    """
    Builds the redis-py client the cache layer talks to.

    For ElastiCache cluster mode use the configuration endpoint as `host` and
    `cluster=True`; set COUPON_CACHE_HASH_TAG_KEYS to co-locate a
    user's partitions on one shard.
    """
    if cluster:
        startup_nodes = [ClusterNode(host, port)]
        return RedisCluster(
            startup_nodes=startup_nodes,
            decode_responses=True,
            skip_full_coverage_check=True
        )
    return redis.Redis(host=host, port=port, db=db, decode_responses=True)
