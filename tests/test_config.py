import pytest

from skillswap.config import load_config, DBConfig

ENV_KEYS = (
    "SECRET_KEY", "DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASSWORD", "DB_PATH",
    "REDIS_HOST", "REDIS_PORT", "TYPING_TTL_MS", "TYPING_LOG_RETENTION_SECONDS",
    "REQUEST_MESSAGE_MAX_LENGTH", "POLLING_INTERVAL", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """ Start without any of the variables and drop whatever the .env file sets """
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)


def test_load_config_defaults(tmp_path, clean_env):
    env_file = tmp_path / ".env"
    env_file.write_text("SECRET_KEY=dev-secret\n")

    config = load_config(str(env_file))

    assert config.jwt.secret_key == "dev-secret"
    assert config.db.is_sqlite
    assert config.db.url == "sqlite+aiosqlite:///data/messaging.db"
    assert config.redis.host == "localhost"
    assert config.redis.port == 6379
    assert config.messaging.typing_ttl_ms == 3000
    assert config.messaging.request_message_max_length == 500
    assert config.log_level == "INFO"


def test_load_config_postgres(tmp_path, clean_env):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "SECRET_KEY=prod-secret\n"
        "DB_HOST=db\n"
        "DB_PORT=5432\n"
        "DB_NAME=skillswap\n"
        "DB_USER=app\n"
        "DB_PASSWORD=pw\n"
        "TYPING_TTL_MS=5000\n"
        "POLLING_INTERVAL=0.5\n"
    )

    config = load_config(str(env_file))

    assert not config.db.is_sqlite
    assert config.db.url == "postgresql+asyncpg://app:pw@db:5432/skillswap"
    assert config.messaging.typing_ttl_ms == 5000
    assert config.messaging.polling_interval == 0.5


def test_sqlite_url_uses_path():
    assert DBConfig(path="/tmp/chat.db").url == "sqlite+aiosqlite:////tmp/chat.db"
