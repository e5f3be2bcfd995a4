import pytest
from redis.exceptions import ConnectionError as RedisConnectionError


class FakeRedis:
    """In-memory stand-in for the parts of ``redis.Redis`` the cache uses."""

    def __init__(self):
        self.data = {}
        self.expiry = {}
        self.fail = False
        self.fail_delete = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    def get(self, name):
        self._check()
        value = self.data.get(name)
        return value.encode("utf-8") if isinstance(value, str) else value

    def set(self, name, value, ex=None):
        self._check()
        self.data[name] = value
        self.expiry[name] = ex
        return True

    def delete(self, *names):
        self._check()
        if self.fail_delete:
            raise RedisConnectionError("connection reset during delete")
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.expiry.pop(name, None)
        return removed


@pytest.fixture
def fake_redis():
    return FakeRedis()
