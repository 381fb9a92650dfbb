import redis

from checkout.utils.retry import redis_retry
from checkout.utils.settings import REDIS_URL
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete in one Lua script: redis runs it atomically,
# so nobody can slip in between GET and DEL
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Short-lived per-user mutex around draft booking find-or-create.
    Tokens make release safe: only the holder can delete its key.
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _draft_key(user_id: int) -> str:
        return f"user:{user_id}:draft-booking:lock"

    @redis_retry()
    def acquire_draft_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self._draft_key(user_id)
        logger.info(f"Acquire lock {key}")
        # SET user:1:draft-booking:lock "<token>" NX EX 5
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=ttl,
            )
        )

    @redis_retry()
    def release_draft_lock(self, user_id: int, token: str) -> bool:
        key = self._draft_key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
