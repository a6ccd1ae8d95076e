"""
Общие фикстуры тестов: фейковая страница Playwright и замоканный драйвер.
"""
import sys
import os
from collections import defaultdict
from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

# Добавляем корневую директорию в путь
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from browser_automation.config import BrowserConfig
from browser_automation.browser.flows import DEFAULT_LOGIN_FLOW


class FakeElement:
    """ElementHandle с записью действий."""

    def __init__(self, selector, text="", value="", error=None):
        self.selector = selector
        self.text = text
        self.value = value
        self.error = error
        self.clicks = 0
        self.type_delay = None

    async def click(self):
        if self.error:
            raise self.error
        self.clicks += 1

    async def fill(self, value):
        if self.error:
            raise self.error
        self.value = value

    async def type(self, value, delay=None):
        self.value += value
        self.type_delay = delay

    async def text_content(self):
        return self.text

    async def is_visible(self):
        return True

    async def get_attribute(self, name):
        return None


class FakePage:
    """
    Страница, где видимы только элементы, добавленные через add().

    wait_for_selector для остальных селекторов падает по таймауту,
    как настоящий Playwright.
    """

    def __init__(self):
        self.elements = {}
        self.handlers = defaultdict(list)
        self.probed = []
        self.url = "about:blank"
        self.goto_error = None
        self.goto_timeout = None
        self.idle_error = None

    def add(self, selector, **kwargs):
        element = FakeElement(selector, **kwargs)
        self.elements[selector] = element
        return element

    def on(self, event, handler):
        self.handlers[event].append(handler)

    def emit(self, event, payload):
        for handler in self.handlers[event]:
            handler(payload)

    async def goto(self, url, timeout=None):
        self.goto_timeout = timeout
        if self.goto_error:
            raise self.goto_error
        self.url = url

    async def wait_for_load_state(self, state, timeout=None):
        if self.idle_error:
            raise self.idle_error

    async def wait_for_selector(self, selector, state="visible", timeout=None):
        self.probed.append(selector)
        if selector in self.elements:
            return self.elements[selector]
        raise PlaywrightTimeoutError(
            f"Timeout {timeout}ms exceeded.\nwaiting for locator('{selector}') to be visible"
        )

    async def query_selector_all(self, selector):
        return [element for element in self.elements.values() if element.text]

    async def content(self):
        return "<html><body></body></html>"


def console_message(type_, text, url="app.js", line=1):
    """Объект с интерфейсом ConsoleMessage."""
    return SimpleNamespace(type=type_, text=text, location={"url": url, "lineNumber": line})


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def mock_playwright(fake_page):
    """Мок async_playwright: драйвер, браузер и фейковая страница."""
    with patch("browser_automation.browser.controller.async_playwright") as mock:
        playwright = MagicMock()
        browser = MagicMock()

        mock.return_value.start = AsyncMock(return_value=playwright)
        playwright.chromium.launch = AsyncMock(return_value=browser)
        playwright.stop = AsyncMock()
        browser.new_page = AsyncMock(return_value=fake_page)
        browser.close = AsyncMock()

        yield SimpleNamespace(
            factory=mock,
            playwright=playwright,
            browser=browser,
            page=fake_page,
        )


@pytest.fixture
def fast_config():
    """Конфигурация без пауз и с короткими таймаутами."""
    return BrowserConfig(
        headless=True,
        devtools=False,
        navigation_timeout=100,
        settle_delay=0,
        candidate_timeout=50,
        login_candidate_timeout=50,
        type_delay=0,
        clear_delay=0,
        observe_delay=0,
    )


@pytest.fixture
def fast_flow():
    """Встроенный сценарий логина без пауз и без поиска маркеров."""
    return replace(
        DEFAULT_LOGIN_FLOW,
        settle_delay=0,
        steps=tuple(
            replace(step, wait_before=0, wait_after=0)
            for step in DEFAULT_LOGIN_FLOW.steps
        ),
        state_markers=(),
    )
