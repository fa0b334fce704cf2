from redis import asyncio as aioredis

class RedisManager:
    def __init__(self, host: str | None = None, port: int | None = None):
        self.host = host or 'localhost'
        self.port = port or 6379

    def get_redis(self) -> aioredis.Redis:
        return aioredis.Redis(host=self.host, port=self.port, db=0, decode_responses=True)
