from dataclasses import dataclass
from environs import Env

@dataclass
class JWTConfig:
    secret_key: str

@dataclass
class DBConfig:
    """ PostgreSQL """
    host: str | None = None
    port: int | None = None
    name: str | None = None
    user: str | None = None
    password: str | None = None

    """ SQLite """
    path: str | None = None

    @property
    def url(self) -> str:
        if self.host:
            return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"
        return f"sqlite+aiosqlite:///{self.path}"

    @property
    def is_sqlite(self) -> bool:
        return not self.host

@dataclass
class RedisConfig:
    host: str | None = 'localhost'
    port: int | None = 6379

@dataclass
class MessagingConfig:
    typing_ttl_ms: int = 3000
    typing_log_retention_seconds: int = 60
    request_message_max_length: int = 500
    polling_interval: float = 3

@dataclass
class Config:
    """ Config """
    jwt: JWTConfig
    db: DBConfig
    redis: RedisConfig
    messaging: MessagingConfig
    log_level: str = 'INFO'

def load_config(path: str | None) -> Config:
    env = Env()
    env.read_env(path)

    return Config(
        jwt=JWTConfig(
            secret_key=env('SECRET_KEY'),
        ),
        db=DBConfig(
            host=env('DB_HOST', None),
            port=env.int('DB_PORT', None),
            name=env('DB_NAME', None),
            user=env('DB_USER', None),
            password=env('DB_PASSWORD', None),
            path=env('DB_PATH', 'data/messaging.db')
        ),
        redis=RedisConfig(
            host=env('REDIS_HOST', 'localhost'),
            port=env.int('REDIS_PORT', 6379)
        ),
        messaging=MessagingConfig(
            typing_ttl_ms=env.int('TYPING_TTL_MS', 3000),
            typing_log_retention_seconds=env.int('TYPING_LOG_RETENTION_SECONDS', 60),
            request_message_max_length=env.int('REQUEST_MESSAGE_MAX_LENGTH', 500),
            polling_interval=env.float('POLLING_INTERVAL', 3)
        ),
        log_level=env('LOG_LEVEL', 'INFO')
    )
