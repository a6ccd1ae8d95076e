"""
Тесты журнала диагностики.
"""
from types import SimpleNamespace

from playwright.async_api import Error as PlaywrightError

from browser_automation.browser.diagnostics import DiagnosticLog, NOT_FOUND
from conftest import FakePage, console_message


def _attached():
    page = FakePage()
    log = DiagnosticLog()
    log.attach(page)
    return page, log


def test_attach_subscribes_three_events():
    page, _ = _attached()

    assert set(page.handlers) == {"console", "pageerror", "requestfailed"}


def test_console_message_format():
    page, log = _attached()

    page.emit("console", console_message("warning", "deprecated API", "https://app/x.js", 42))

    assert log.lines() == ["[WARNING] deprecated API (https://app/x.js:42)"]
    assert log.entries[0].is_problem


def test_page_error_format():
    page, log = _attached()

    page.emit("pageerror", PlaywrightError("x is not defined"))

    assert log.lines() == ["[ERROR] Uncaught Error: x is not defined"]


def test_request_failed_format():
    page, log = _attached()

    page.emit("requestfailed", SimpleNamespace(url="https://api/x", failure="net::ERR_FAILED"))
    page.emit("requestfailed", SimpleNamespace(url="https://api/y", failure=None))

    assert log.lines() == [
        "[ERROR] Failed Request: https://api/x - net::ERR_FAILED",
        "[ERROR] Failed Request: https://api/y - unknown error",
    ]


def test_entries_keep_arrival_order_and_filters():
    page, log = _attached()

    page.emit("console", console_message("log", "boot"))
    log.append(NOT_FOUND, "username field: failed with selector #u")
    page.emit("console", console_message("error", "boom"))

    assert [entry.level for entry in log] == ["log", NOT_FOUND, "error"]
    assert [entry.text for entry in log.problems()] == ["boom (app.js:1)"]
    assert len(log.not_found()) == 1
    assert len(log) == 3


def test_entries_returns_copy():
    log = DiagnosticLog()
    log.append("info", "hello")

    log.entries.clear()

    assert len(log) == 1
