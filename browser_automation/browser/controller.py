"""
BrowserAutomation - управление сессией браузера через Playwright.

Одна сессия = один браузер и одна страница. Элементы находятся
перебором упорядоченных списков кандидатов-селекторов: первый
видимый элемент выигрывает, остальные кандидаты не проверяются.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from playwright.async_api import (
    async_playwright,
    Playwright,
    Browser,
    ElementHandle,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    Error as PlaywrightError,
)

from ..config import BrowserConfig, get_config
from .diagnostics import DiagnosticLog, NOT_FOUND
from .flows import DEFAULT_LOGIN_FLOW, FlowStep, LoginFlow
from .selectors import click_candidates, fill_candidates


logger = logging.getLogger(__name__)


ElementAction = Callable[[ElementHandle], Awaitable[None]]


class BrowserError(Exception):
    """Базовое исключение для ошибок браузера."""
    pass


class NotInitializedError(BrowserError):
    """Операция вызвана до start()."""

    def __init__(self, message: str = "Browser not initialized. Call start() first."):
        super().__init__(message)


class ElementNotFoundError(BrowserError):
    """Ни один кандидат-селектор не дал видимого элемента."""

    def __init__(self, target: str, candidates: Sequence[str] = ()):
        self.target = target
        self.candidates = tuple(candidates)
        super().__init__(
            f"Could not find {target} with any of the attempted selectors "
            f"({len(self.candidates)} tried)"
        )


class NavigationError(BrowserError):
    """Ошибка навигации."""
    pass


class NavigationTimeoutError(NavigationError):
    """Страница не загрузилась за отведённое время."""
    pass


@dataclass
class StepOutcome:
    """Результат одного шага login()."""

    name: str
    selector: Optional[str]
    ok: bool
    error: Optional[str] = None


@dataclass
class LoginResult:
    """Итог login(): шаги, проблемы из консоли и найденные тексты состояния."""

    steps: List[StepOutcome] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)
    state_texts: List[str] = field(default_factory=list)

    @property
    def failed_steps(self) -> List[StepOutcome]:
        return [step for step in self.steps if not step.ok]


def _fill_with(value: str) -> ElementAction:
    """Действие: мгновенно заполнить поле значением."""
    async def action(element: ElementHandle) -> None:
        await element.fill(value)
    return action


async def _click(element: ElementHandle) -> None:
    await element.click()


class BrowserAutomation:
    """
    Контроллер сессии браузера.

    Состояния: не инициализирован / активен. Все операции взаимодействия
    требуют активной сессии и иначе падают с NotInitializedError.

    Attributes:
        config: Конфигурация браузера
        login_flow: Сценарий логина по умолчанию

    Example:
        ```python
        async with BrowserAutomation() as tools:
            await tools.navigate("https://example.com")
            await tools.fill("username", "alice")
            await tools.click("Sign In")
        ```
    """

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        login_flow: Optional[LoginFlow] = None,
    ):
        """
        Инициализирует контроллер.

        Args:
            config: Конфигурация браузера. Если не указана,
                   используется глобальная конфигурация.
            login_flow: Сценарий для login(). По умолчанию встроенный.
        """
        self.config = config or get_config().browser
        self.login_flow = login_flow or DEFAULT_LOGIN_FLOW
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None
        self._diagnostics = DiagnosticLog()

    @property
    def page(self) -> Optional[Page]:
        """Возвращает активную страницу."""
        return self._page

    @property
    def is_active(self) -> bool:
        return self._page is not None

    @property
    def diagnostics(self) -> DiagnosticLog:
        """Журнал диагностики текущей (или последней) сессии."""
        return self._diagnostics

    async def start(self) -> Page:
        """
        Запускает браузер и открывает одну страницу.

        Повторный вызов при активной сессии ничего не делает.
        Журнал диагностики начинает заполняться сразу.

        Returns:
            Page: Активная страница браузера

        Raises:
            BrowserError: Если не удалось запустить браузер
        """
        if self._page is not None:
            logger.debug("Браузер уже запущен")
            return self._page

        logger.info(f"Запуск браузера: {self.config.browser_type}")

        try:
            self._playwright = await async_playwright().start()

            browser_type = getattr(
                self._playwright,
                self.config.browser_type,
                self._playwright.chromium
            )

            args = []
            if self.config.devtools and self.config.browser_type == "chromium":
                args.append("--auto-open-devtools-for-tabs")

            self._browser = await browser_type.launch(
                headless=self.config.headless,
                args=args,
            )
            page = await self._browser.new_page(
                viewport={
                    "width": self.config.viewport_width,
                    "height": self.config.viewport_height
                }
            )

            self._diagnostics = DiagnosticLog()
            self._diagnostics.attach(page)
            self._page = page

        except PlaywrightError as e:
            logger.error(f"Ошибка запуска браузера: {e}")
            await self.stop()
            raise BrowserError(f"Failed to launch browser: {e}") from e

        logger.info("Браузер успешно запущен")
        return self._page

    async def stop(self) -> None:
        """
        Закрывает браузер и освобождает ресурсы.

        Безопасно вызывать повторно и до start().
        """
        if self._browser is None and self._playwright is None:
            logger.debug("Браузер не запущен, закрывать нечего")
            return

        logger.info("Закрытие браузера")

        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.error(f"Ошибка при закрытии браузера: {e}")

        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except PlaywrightError as e:
                logger.error(f"Ошибка при остановке Playwright: {e}")

        self._browser = None
        self._page = None
        self._playwright = None
        logger.info("Браузер закрыт")

    async def navigate(self, url: str) -> str:
        """
        Переходит на URL и ждёт, пока сеть успокоится.

        Args:
            url: URL для навигации

        Returns:
            str: Текущий URL после навигации

        Raises:
            NotInitializedError: Если браузер не запущен
            NavigationTimeoutError: Если страница не успокоилась за navigation_timeout
            NavigationError: При прочих ошибках навигации
        """
        page = self._ensure_page()

        try:
            logger.info(f"Навигация на: {url}")
            await page.goto(url, timeout=self.config.navigation_timeout)

            logger.debug("Ожидание network idle")
            await page.wait_for_load_state(
                "networkidle",
                timeout=self.config.navigation_timeout
            )
        except PlaywrightTimeoutError as e:
            logger.error(f"Таймаут навигации: {url}")
            raise NavigationTimeoutError(
                f"Page {url} did not load within {self.config.navigation_timeout}ms"
            ) from e
        except PlaywrightError as e:
            logger.error(f"Ошибка навигации: {e}")
            raise NavigationError(f"Navigation to {url} failed: {e}") from e

        await self._pause(self.config.settle_delay)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Содержимое страницы:\n{await page.content()}")

        logger.info(f"Навигация завершена: {page.url}")
        return page.url

    async def resolve_and_act(
        self,
        candidates: Sequence[str],
        action: ElementAction,
        target: str,
        timeout: Optional[int] = None,
    ) -> str:
        """
        Перебирает кандидатов по порядку и выполняет действие
        над первым видимым элементом.

        Неудача кандидата (таймаут, невалидный селектор, ошибка действия)
        записывается в журнал и ведёт к следующему кандидату.

        Args:
            candidates: Селекторы в порядке приоритета
            action: Async действие над найденным элементом
            target: Логическое имя цели для логов и ошибки
            timeout: Таймаут ожидания одного кандидата (мс)

        Returns:
            str: Сработавший селектор

        Raises:
            NotInitializedError: Если браузер не запущен
            ElementNotFoundError: Если ни один кандидат не подошёл
        """
        page = self._ensure_page()
        if timeout is None:
            timeout = self.config.candidate_timeout

        for selector in candidates:
            logger.debug(f"Пробуем селектор для {target}: {selector}")
            try:
                element = await page.wait_for_selector(
                    selector,
                    state="visible",
                    timeout=timeout
                )
                if element is not None:
                    await action(element)
                    logger.info(f"{target}: успешно, селектор {selector}")
                    return selector
                reason = "no element returned"
            except PlaywrightError as e:
                reason = str(e).splitlines()[0] if str(e) else type(e).__name__

            self._diagnostics.append(NOT_FOUND, f"{target}: failed with selector {selector}")
            logger.info(f"Failed with {target} selector: {selector} ({reason})")

        logger.error(f"Все кандидаты исчерпаны для: {target}")
        raise ElementNotFoundError(target, candidates)

    async def click(self, description: str, timeout: Optional[int] = None) -> str:
        """
        Кликает по элементу, описанному текстом или селектором.

        Args:
            description: Текст кнопки/ссылки или селектор
            timeout: Таймаут одного кандидата (мс)

        Returns:
            str: Сработавший селектор

        Raises:
            NotInitializedError: Если браузер не запущен
            ElementNotFoundError: Если элемент не найден
        """
        self._ensure_page()
        logger.info(f"Клик по элементу: {description}")
        await self._log_inventory('button, [role="button"], a')

        return await self.resolve_and_act(
            click_candidates(description),
            _click,
            target=f"element '{description}'",
            timeout=timeout,
        )

    async def fill(self, description: str, value: str, timeout: Optional[int] = None) -> str:
        """
        Вводит текст в поле: очищает его и печатает посимвольно,
        чтобы сработали обработчики input-событий.

        Args:
            description: Placeholder, name, id поля или селектор
            value: Текст для ввода
            timeout: Таймаут одного кандидата (мс)

        Returns:
            str: Сработавший селектор

        Raises:
            NotInitializedError: Если браузер не запущен
            ElementNotFoundError: Если поле не найдено
        """
        self._ensure_page()
        logger.info(f"Ввод текста в поле: {description}")
        await self._log_inventory("input")

        async def type_into(element: ElementHandle) -> None:
            await element.fill("")
            await self._pause(self.config.clear_delay)
            await element.type(value, delay=self.config.type_delay)

        return await self.resolve_and_act(
            fill_candidates(description),
            type_into,
            target=f"field '{description}'",
            timeout=timeout,
        )

    async def login(
        self,
        username: str,
        password: str,
        flow: Optional[LoginFlow] = None,
    ) -> LoginResult:
        """
        Выполняет сценарий логина.

        Ввод логина, пароля и нажатие кнопки входа обязательны:
        если поле или кнопка не найдены, сценарий прерывается.
        Шаги после входа необязательны: ошибка шага пишется в лог
        и не мешает следующим шагам. Ошибки в консоли страницы
        попадают в отчёт, но исключения не вызывают.

        Args:
            username: Имя пользователя
            password: Пароль
            flow: Сценарий. По умолчанию self.login_flow

        Returns:
            LoginResult: Итог по шагам и проблемы из консоли

        Raises:
            NotInitializedError: Если браузер не запущен
            ElementNotFoundError: Если не найдено поле логина/пароля или кнопка входа
        """
        page = self._ensure_page()
        flow = flow or self.login_flow
        timeout = self.config.login_candidate_timeout
        result = LoginResult()

        mandatory = (
            ("username field", flow.username, _fill_with(username)),
            ("password field", flow.password, _fill_with(password)),
            ("login button", flow.submit, _click),
        )
        for name, candidates, action in mandatory:
            selector = await self.resolve_and_act(candidates, action, name, timeout)
            result.steps.append(StepOutcome(name=name, selector=selector, ok=True))

        try:
            await page.wait_for_load_state(
                "networkidle",
                timeout=self.config.navigation_timeout
            )
        except PlaywrightTimeoutError:
            logger.warning("Network idle не дождались после входа, продолжаем")
        await self._pause(flow.settle_delay)

        for step in flow.steps:
            result.steps.append(await self._run_step(step, timeout))

        logger.info(f"Наблюдение за консолью {self.config.observe_delay}мс")
        await self._pause(self.config.observe_delay)

        result.state_texts = await self._collect_state_texts(flow.state_markers)

        result.diagnostics = [entry.line for entry in self._diagnostics.problems()]
        if result.diagnostics:
            for line in result.diagnostics:
                logger.warning(f"Проблема за сессию: {line}")
        else:
            logger.info("Ошибок за сессию не найдено")

        return result

    async def _run_step(self, step: FlowStep, timeout: int) -> StepOutcome:
        """Выполняет необязательный шаг, ошибки не пробрасываются."""
        await self._pause(step.wait_before)

        action = _click if step.action == "click" else _fill_with(step.value or "")
        try:
            selector = await self.resolve_and_act(step.candidates, action, step.name, timeout)
        except BrowserError as e:
            logger.warning(f"Шаг пропущен: {step.name} ({e})")
            return StepOutcome(name=step.name, selector=None, ok=False, error=str(e))

        await self._pause(step.wait_after)
        return StepOutcome(name=step.name, selector=selector, ok=True)

    async def _collect_state_texts(self, markers: Sequence[str]) -> List[str]:
        """Тексты элементов страницы, содержащие маркеры состояния."""
        if not markers:
            return []

        found: List[str] = []
        try:
            for element in await self._page.query_selector_all("div, button, span"):
                text = await element.text_content()
                if text and any(marker in text for marker in markers):
                    found.append(text.strip())
                    logger.info(f"Элемент состояния: {text.strip()}")
        except PlaywrightError as e:
            logger.warning(f"Не удалось прочитать состояние страницы: {e}")
        return found

    async def _log_inventory(self, selector: str) -> None:
        """Отладочный список элементов страницы (только при DEBUG)."""
        if not logger.isEnabledFor(logging.DEBUG):
            return

        try:
            for element in await self._page.query_selector_all(selector):
                text = (await element.text_content() or "").strip()
                visible = await element.is_visible()
                name = await element.get_attribute("name")
                placeholder = await element.get_attribute("placeholder")
                logger.debug(
                    f"Найден элемент - Text: {text[:50]}, Name: {name}, "
                    f"Placeholder: {placeholder}, Visible: {visible}"
                )
        except PlaywrightError as e:
            logger.debug(f"Не удалось перечислить элементы (не критично): {e}")

    async def _pause(self, delay_ms: int) -> None:
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    def _ensure_page(self) -> Page:
        """
        Проверяет, что страница доступна.

        Raises:
            NotInitializedError: Если браузер не запущен
        """
        if self._page is None:
            raise NotInitializedError()
        return self._page

    async def __aenter__(self) -> "BrowserAutomation":
        """Поддержка async context manager."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Закрытие при выходе из контекста."""
        await self.stop()
