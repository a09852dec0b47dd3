from aeroplane.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)

    settings = Settings(_env_file=None)

    assert settings.PORT == 8080
    assert settings.ROOM_IDLE_TTL_SECONDS == 0
    assert settings.STATIC_DIR == "public"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    settings = Settings(_env_file=None)

    assert settings.PORT == 9090
    assert settings.LOG_LEVEL == "DEBUG"
