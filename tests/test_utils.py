"""
Tests for the duplicate-event cache, retry policy, helpers and logging setup.
"""

import logging

import pytest

from packslip.utils.dedupe import DedupeCache
from packslip.utils.helpers import format_file_size, get_file_extension
from packslip.utils.logger import get_logger, set_level, setup_logger
from packslip.utils.retry import compute_delay, with_retry


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_dedupe_reports_repeat_within_ttl():
    clock = FakeClock()
    cache = DedupeCache(ttl_seconds=300, clock=clock)

    assert cache.seen("evt-1") is False
    clock.now += 299
    assert cache.seen("evt-1") is True


def test_dedupe_forgets_after_ttl():
    clock = FakeClock()
    cache = DedupeCache(ttl_seconds=300, clock=clock)
    cache.seen("evt-1")

    clock.now += 301

    assert cache.seen("evt-1") is False


def test_dedupe_prunes_expired_keys():
    clock = FakeClock()
    cache = DedupeCache(ttl_seconds=10, clock=clock)
    cache.seen("a")
    cache.seen("b")

    clock.now += 11
    cache.prune()

    assert len(cache) == 0


def test_dedupe_rejects_bad_ttl():
    with pytest.raises(ValueError):
        DedupeCache(ttl_seconds=0)


def test_with_retry_returns_after_transient_failures():
    attempts = []
    sleeps = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise ConnectionError("down")
        return "ok"

    assert with_retry(flaky, retries=3, sleep=sleeps.append) == "ok"
    assert len(attempts) == 3
    assert len(sleeps) == 2


def test_with_retry_gives_up_after_budget():
    sleeps = []

    def always_fails():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        with_retry(always_fails, retries=2, sleep=sleeps.append)

    assert len(sleeps) == 2


def test_with_retry_does_not_retry_permanent_errors():
    sleeps = []

    def bad_request():
        raise ValueError("rejected")

    with pytest.raises(ValueError):
        with_retry(bad_request, retries=5, should_retry=lambda e: not isinstance(e, ValueError), sleep=sleeps.append)

    assert sleeps == []


def test_compute_delay_grows_and_is_capped():
    """The first retry waits min_delay * factor plus jitter"""
    first = compute_delay(1, min_delay=0.2, factor=2, max_delay=3.0)
    capped = compute_delay(10, min_delay=0.2, factor=2, max_delay=3.0)

    assert 0.4 <= first <= 0.6
    assert capped == 3.0


@pytest.mark.parametrize("path, expected", [
    ("SLIP.PDF", ".pdf"),
    ("noextension", ""),
    (None, ""),
])
def test_get_file_extension(path, expected):
    assert get_file_extension(path) == expected


def test_format_file_size():
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(12) == "12.0 B"


def test_get_logger_nests_under_namespace():
    assert get_logger("main").name == "packslip.main"
    assert get_logger("packslip.parser.engine").name == "packslip.parser.engine"
    assert get_logger("packslipper").name == "packslip.packslipper"


def test_setup_logger_writes_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "packslip.log"
    app_logger = setup_logger(level="info", log_file=str(log_file), colorize=False)

    get_logger("tests").info("parsed 3 line items")
    for handler in app_logger.handlers:
        handler.flush()

    assert len(app_logger.handlers) == 2
    assert "parsed 3 line items" in log_file.read_text(encoding="utf-8")
    setup_logger(colorize=False)


def test_set_level_applies_to_handlers():
    app_logger = setup_logger(level="INFO", colorize=False)

    set_level(logging.WARNING)

    assert app_logger.level == logging.WARNING
    assert all(handler.level == logging.WARNING for handler in app_logger.handlers)

    with pytest.raises(ValueError):
        set_level("chatty")
