from timetabler.core.config import Settings


def test_generation_defaults():
    settings = Settings(_env_file=None)
    assert settings.generation_attempts == 3
    assert settings.semester_duration_weeks == 16
    assert settings.min_free_periods_per_week == 2
    assert settings.violation_penalty == 10.0
    assert settings.random_seed is None


def test_cors_origins_accepts_comma_separated_string():
    settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test,")
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_cors_origins_accepts_json_list():
    settings = Settings(_env_file=None, cors_origins='["http://a.test", " http://b.test "]')
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("GENERATION_ATTEMPTS", "5")
    monkeypatch.setenv("RANDOM_SEED", "123")
    settings = Settings(_env_file=None)
    assert settings.generation_attempts == 5
    assert settings.random_seed == 123
