from src.config.loader import get_bool_env, get_int_env, get_optional_str_env, get_str_env


def test_str_env_falls_back_to_default(monkeypatch):
    monkeypatch.delenv("SESSION_DB_PATH", raising=False)
    assert get_str_env("SESSION_DB_PATH", "sessions.db") == "sessions.db"

    monkeypatch.setenv("SESSION_DB_PATH", "  /var/lib/app/sessions.db ")
    assert get_str_env("SESSION_DB_PATH", "sessions.db") == "/var/lib/app/sessions.db"


def test_optional_str_env_treats_blank_as_unset(monkeypatch):
    monkeypatch.setenv("SESSION_DATABASE_URL", "   ")
    assert get_optional_str_env("SESSION_DATABASE_URL") is None

    monkeypatch.setenv("SESSION_DATABASE_URL", "postgresql://localhost/app")
    assert get_optional_str_env("SESSION_DATABASE_URL") == "postgresql://localhost/app"


def test_int_env_parses_and_rejects_garbage(monkeypatch):
    monkeypatch.setenv("SESSION_TTL_SECONDS", "3600")
    assert get_int_env("SESSION_TTL_SECONDS", 86400) == 3600

    monkeypatch.setenv("SESSION_TTL_SECONDS", "one hour")
    assert get_int_env("SESSION_TTL_SECONDS", 86400) == 86400


def test_bool_env_accepts_common_spellings(monkeypatch):
    monkeypatch.setenv("SESSION_PRUNE_ON_STARTUP", "off")
    assert get_bool_env("SESSION_PRUNE_ON_STARTUP", True) is False

    monkeypatch.setenv("SESSION_PRUNE_ON_STARTUP", "Yes")
    assert get_bool_env("SESSION_PRUNE_ON_STARTUP", False) is True

    monkeypatch.setenv("SESSION_PRUNE_ON_STARTUP", "maybe")
    assert get_bool_env("SESSION_PRUNE_ON_STARTUP", True) is True
