"""
Best-effort batched submission on top of a non-transactional redis-py pipeline.

A batch is sent in one round trip but is NOT atomic across keys: each command
succeeds or fails on its own. Data commands (HSET / HDEL) that fail are raised
as BatchPartiallyApplied; a failed EXPIRE only affects when the cache stops
trusting a key, so it is logged and tolerated.
"""
import logging
from contextlib import contextmanager

from redis.exceptions import RedisError

from .exceptions import StoreUnavailable, BatchPartiallyApplied

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(operation):
    """Re-raises any redis-py error inside the block as StoreUnavailable."""
    try:
        yield
    except RedisError as exc:
        raise StoreUnavailable(f"{operation} failed: {exc}") from exc


class BestEffortBatch:

    def __init__(self, client, name):
        self.name = name
        self.pipe = client.pipeline(transaction=False)
        # (description, best_effort) per queued command, in pipeline order
        self._commands = []

    def __len__(self):
        return len(self._commands)

    def put_all(self, key, mapping):
        self.pipe.hset(key, mapping=mapping)
        self._commands.append((f"HSET {key}", False))

    def delete_fields(self, key, fields):
        self.pipe.hdel(key, *fields)
        self._commands.append((f"HDEL {key}", False))

    def expire(self, key, seconds):
        self.pipe.expire(key, seconds)
        self._commands.append((f"EXPIRE {key} {seconds}", True))

    def execute(self):
        if not self._commands:
            return []
        with store_errors(self.name):
            results = self.pipe.execute(raise_on_error=False)
        logger.debug("Pipeline %s result: %s", self.name, results)

        failures = []
        for (description, best_effort), result in zip(self._commands, results):
            if not isinstance(result, Exception):
                continue
            if best_effort:
                logger.warning("Pipeline %s: TTL refresh failed (%s): %s", self.name, description, result)
            else:
                failures.append((description, result))
        if failures:
            logger.error("Pipeline %s: %d data command(s) failed", self.name, len(failures))
            raise BatchPartiallyApplied(failures)
        return results
