import config as config_mod


def test_load_cache_config_defaults(monkeypatch):
    for name in (
        "CACHE_MAX_MEMORY_BYTES",
        "CACHE_MAX_ENTRIES",
        "CACHE_MAX_FILE_SIZE",
        "CACHE_TTL_SECONDS",
        "CACHE_SWEEP_INTERVAL",
        "CACHE_INTEGRITY_CHECK",
        "CACHE_ALLOWED_EXTENSIONS",
        "CACHE_READ_CONCURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)

    c = config_mod.load_cache_config()
    assert c.max_entries == 10_000
    assert c.integrity_check_enabled is True


def test_load_cache_config_from_env(monkeypatch):
    monkeypatch.setenv("CACHE_MAX_MEMORY_BYTES", "1024")
    monkeypatch.setenv("CACHE_MAX_ENTRIES", "5")
    monkeypatch.setenv("CACHE_MAX_FILE_SIZE", "512")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "2.5")
    monkeypatch.setenv("CACHE_SWEEP_INTERVAL", "1")
    monkeypatch.setenv("CACHE_INTEGRITY_CHECK", "off")
    monkeypatch.setenv("CACHE_ALLOWED_EXTENSIONS", "py, MD,")
    monkeypatch.setenv("CACHE_READ_CONCURRENCY", "3")
    monkeypatch.setenv("CACHE_FOLD_CASE", "yes")

    c = config_mod.load_cache_config()
    assert c.max_memory_usage == 1024
    assert c.max_entries == 5
    assert c.max_file_size == 512
    assert c.ttl_seconds == 2.5
    assert c.sweep_interval_seconds == 1.0
    assert c.integrity_check_enabled is False
    assert c.allowed_extensions == frozenset({".py", ".md", ""})
    assert c.read_concurrency == 3
    assert c.fold_case is True


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("CACHE_MAX_ENTRIES", "many")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "soon")

    c = config_mod.load_cache_config()
    assert c.max_entries == 10_000
    assert c.ttl_seconds == 1800
