import redis
from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# KEYS[1] = klucz locka, ARGV[1] = run id wlasciciela
# skrypt wykonuje sie atomowo: po wygasnieciu TTL klucz moze nalezec do innego runu
_RELEASE_LUA = """
local holder = redis.call('GET', KEYS[1])
if holder ~= ARGV[1] then
    return 0
end
return redis.call('DEL', KEYS[1])
"""


class LockService:
    """
    -lock na zadanie cykliczne (jeden sweep naraz na wszystkich workerach)
    -zwalnianie locka tylko przez wlasciciela
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(name: str) -> str:
        return f"job:{name}:lock"

    @redis_retry()
    def acquire(self, name: str, owner: str, ttl: int) -> bool:
        key = self._key(name)
        logger.info("Acquiring job lock", key=key, owner=owner, ttl=ttl)
        #SET job:auto-deliver:lock "<owner>" NX EX 900
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True,  #tylko jesli klucz nie istnieje
                ex=ttl,  #wygasa sam, worker ktory padl nie blokuje na zawsze
            )
        )

    @redis_retry()
    def release(self, name: str, owner: str) -> bool:
        key = self._key(name)
        logger.info("Releasing job lock", key=key, owner=owner)
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
