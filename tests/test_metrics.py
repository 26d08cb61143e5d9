import tmdb_movies.metrics as metrics


def test_inc_snapshot_reset():
    metrics.inc("cache_hits")
    metrics.inc("cache_hits", 2)
    metrics.inc("custom_counter")

    snap = metrics.snapshot()
    assert snap["cache_hits"] == 3
    assert snap["custom_counter"] == 1

    metrics.reset()
    assert all(v == 0 for v in metrics.snapshot().values())


def test_format_top_skips_zeros_and_orders():
    top = metrics._format_top({"a": 1, "b": 5, "c": 0, "d": 5}, top_n=2)
    assert top == [("b", 5), ("d", 5)]


def test_log_summary(monkeypatch):
    lines = []
    monkeypatch.setattr(metrics.logger, "info", lambda msg, **kw: lines.append(msg))

    metrics.log_summary()
    assert lines == []

    metrics.log_summary(force=True)
    assert lines[-1] == "  (all zeros)"

    lines.clear()
    metrics.inc("http_requests", 4)
    metrics.log_summary()
    assert lines[0] == "[TMDB][METRICS] summary"
    assert "http_requests" in lines[1] and lines[1].endswith(": 4")
