import json

from arena.core.config import Settings, load_settings


def test_defaults():
    settings = Settings()

    assert settings.DEFAULT_TITLE == "TuringArena"
    assert settings.POLL_INTERVAL_PENDING_MS < settings.POLL_INTERVAL_IDLE_MS


def test_load_settings_from_json(tmp_path):
    path = tmp_path / "turingarena.config.json"
    path.write_text(json.dumps({
        "DATABASE_URL": "sqlite+aiosqlite:///./other.db",
        "PORT": 8080,
        "TASK_MAKER_COMMAND": "task-maker-rust --cache off",
    }))

    settings = load_settings(path)

    assert settings.DATABASE_URL == "sqlite+aiosqlite:///./other.db"
    assert settings.PORT == 8080
    assert settings.TASK_MAKER_COMMAND == "task-maker-rust --cache off"


def test_missing_file_falls_back_to_defaults(tmp_path):
    settings = load_settings(tmp_path / "missing.json")

    assert settings.PORT == Settings().PORT


def test_invalid_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    assert load_settings(path).DATABASE_URL == Settings().DATABASE_URL


def test_invalid_value_falls_back_to_defaults(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"PORT": "not a port"}))

    assert load_settings(path).PORT == Settings().PORT
