from datetime import timedelta

import tmdb_movies.config_base as cfg
import tmdb_movies.config_tmdb as cfg_tmdb


def test_clean_env_raw():
    assert cfg._clean_env_raw(None) is None
    assert cfg._clean_env_raw("  ") is None
    assert cfg._clean_env_raw("'value'") == "value"
    assert cfg._clean_env_raw('"value"') == "value"
    assert cfg._clean_env_raw("  value ") == "value"


def test_get_env_parsers(monkeypatch):
    monkeypatch.delenv("TEST_STR", raising=False)
    assert cfg._get_env_str("TEST_STR", "default") == "default"

    monkeypatch.setenv("TEST_STR", "  hello ")
    assert cfg._get_env_str("TEST_STR", "default") == "hello"

    monkeypatch.setenv("TEST_INT", "10")
    assert cfg._get_env_int("TEST_INT", 1) == 10
    monkeypatch.setenv("TEST_INT", "bad")
    assert cfg._get_env_int("TEST_INT", 1) == 1

    monkeypatch.setenv("TEST_FLOAT", "3.5")
    assert cfg._get_env_float("TEST_FLOAT", 1.0) == 3.5
    monkeypatch.setenv("TEST_FLOAT", "bad")
    assert cfg._get_env_float("TEST_FLOAT", 1.0) == 1.0

    monkeypatch.setenv("TEST_BOOL", "yes")
    assert cfg._get_env_bool("TEST_BOOL", False) is True
    monkeypatch.setenv("TEST_BOOL", "off")
    assert cfg._get_env_bool("TEST_BOOL", True) is False
    monkeypatch.setenv("TEST_BOOL", "maybe")
    assert cfg._get_env_bool("TEST_BOOL", True) is True


def test_caps():
    assert cfg._cap_int("CAP", 1, min_v=3, max_v=5) == 3
    assert cfg._cap_int("CAP", 9, min_v=3, max_v=5) == 5
    assert cfg._cap_int("CAP", 4, min_v=3, max_v=5) == 4
    assert cfg._cap_float_min("CAPF", -1.0, min_v=0.5) == 0.5


def test_resolve_dir(tmp_path):
    assert cfg._resolve_dir("cache", relative_to=tmp_path) == tmp_path / "cache"
    assert cfg._resolve_dir(str(tmp_path / "abs"), relative_to=tmp_path / "x") == tmp_path / "abs"


def test_client_settings_from_env_uses_module_values(monkeypatch):
    monkeypatch.setattr(cfg_tmdb, "TMDB_API_KEY", "k")
    monkeypatch.setattr(cfg_tmdb, "TMDB_CACHE_MAX_AGE_DAYS", 1.5)

    settings = cfg_tmdb.TmdbClientSettings.from_env()

    assert settings.api_key == "k"
    assert settings.cache_max_age == timedelta(days=1.5)
    assert settings.cache_root == cfg_tmdb.TMDB_CACHE_ROOT
