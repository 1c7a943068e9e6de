"""
Tests for the logger system

The logger is a process-wide singleton; configure_logger() updates it in
place so bound loggers created at import time keep working.
"""

from forgemotion.models.enums import LogCategory, LogLevel
from forgemotion.utils.logger import LogRecord, configure_logger, get_category_logger, get_logger


def test_logger_is_singleton():
    assert get_logger() is get_logger()


def test_configure_preserves_singleton():
    original = get_logger()
    configure_logger(LogLevel.DEBUG, use_colors=False)

    assert get_logger() is original
    assert get_logger().min_level == LogLevel.DEBUG


def test_output_format(capsys):
    configure_logger(LogLevel.INFO, use_colors=False)
    get_logger().info(LogCategory.DISPATCH, "Routine failed", node="hero-counter", kind="COUNTER")

    lines = capsys.readouterr().out.splitlines()
    assert "DISPATCH" in lines[0]
    assert lines[0].endswith("<hero-counter> Routine failed")
    assert len(lines) == 2
    assert lines[1].strip() == "└─ kind: COUNTER"


def test_level_filtering(capsys):
    configure_logger(LogLevel.WARN, use_colors=False)
    log = get_category_logger(LogCategory.SCROLL)

    log.debug("hidden")
    log.info("hidden")
    log.warn("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "shown" in out


def test_bound_logger_category(capsys):
    configure_logger(LogLevel.DEBUG, use_colors=False)
    log = get_category_logger(LogCategory.POINTER)

    log.debug("Field released")
    log.with_category(LogCategory.A11Y).info("Announcement")

    lines = capsys.readouterr().out.splitlines()
    assert "POINTER" in lines[0]
    assert "A11Y" in lines[1]


def test_node_bound_logger_keeps_context(capsys):
    configure_logger(LogLevel.DEBUG, use_colors=False)
    log = get_category_logger(LogCategory.ANIMATION).for_node("stat-clients")

    log.debug("Counter started", target=1000)
    log.with_category(LogCategory.DISPATCH).info("Finished")

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].endswith("<stat-clients> Counter started")
    assert lines[1].strip() == "└─ target: 1000"
    assert "DISPATCH" in lines[2] and lines[2].endswith("<stat-clients> Finished")


def test_broadcaster_receives_records(capsys):
    records = []
    configure_logger(LogLevel.INFO, use_colors=False)
    get_logger().set_broadcaster(records.append)
    try:
        get_category_logger(LogCategory.CONFIG).warn("Unknown config key ignored", key="fade.bogus")
        get_category_logger(LogCategory.CONFIG).debug("filtered out")
        get_category_logger(LogCategory.DISPATCH).for_node("hero").info("Dispatching", kind="FADE")
    finally:
        get_logger().set_broadcaster(None)

    assert all(isinstance(r, LogRecord) for r in records)
    assert [r.level for r in records] == [LogLevel.WARN, LogLevel.INFO]
    assert records[0].category == LogCategory.CONFIG
    assert records[0].node_id is None
    assert records[0].text() == "Unknown config key ignored (key: fade.bogus)"
    assert records[1].node_id == "hero"
    assert records[1].details == {"kind": "FADE"}
    assert records[1].to_dict()["message"] == "Dispatching (kind: FADE)"


def test_failing_broadcaster_is_detached(capsys):
    calls = []

    def broken(record):
        calls.append(record)
        raise RuntimeError("console gone")

    configure_logger(LogLevel.INFO, use_colors=False)
    get_logger().set_broadcaster(broken)
    try:
        get_logger().info(LogCategory.SYSTEM, "first")
        get_logger().info(LogCategory.SYSTEM, "second")
    finally:
        get_logger().set_broadcaster(None)

    assert len(calls) == 1
    out = capsys.readouterr().out
    assert "Log broadcaster failed, detached" in out
    assert "second" in out
