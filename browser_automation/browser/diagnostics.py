"""
DiagnosticLog - журнал диагностики страницы.

Собирает сообщения консоли, необработанные ошибки страницы
и упавшие сетевые запросы через нативные события Playwright,
а также записи о кандидатах-селекторах, которые не сработали.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List

from playwright.async_api import ConsoleMessage, Page, Request, Error as PlaywrightError


logger = logging.getLogger(__name__)


# Уровни, которые считаются проблемами при итоговом отчёте
PROBLEM_LEVELS = ("error", "warning")

NOT_FOUND = "not_found"


@dataclass(frozen=True)
class DiagnosticEntry:
    """Одна запись журнала."""

    level: str
    text: str

    @property
    def line(self) -> str:
        """Строка вида ``[LEVEL] text``."""
        return f"[{self.level.upper()}] {self.text}"

    @property
    def is_problem(self) -> bool:
        return self.level in PROBLEM_LEVELS


class DiagnosticLog:
    """
    Упорядоченный append-only журнал диагностики одной сессии.

    Записи добавляются только обработчиками событий браузера
    и механизмом перебора селекторов; читаются один раз в конце
    сценария.

    Example:
        ```python
        log = DiagnosticLog()
        log.attach(page)
        ...
        for entry in log.problems():
            print(entry.line)
        ```
    """

    def __init__(self) -> None:
        self._entries: List[DiagnosticEntry] = []

    def append(self, level: str, text: str) -> DiagnosticEntry:
        entry = DiagnosticEntry(level=level.lower(), text=text)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> List[DiagnosticEntry]:
        """Копия записей в порядке поступления."""
        return list(self._entries)

    def lines(self) -> List[str]:
        return [entry.line for entry in self._entries]

    def problems(self) -> List[DiagnosticEntry]:
        """Записи уровня error/warning."""
        return [entry for entry in self._entries if entry.is_problem]

    def not_found(self) -> List[DiagnosticEntry]:
        """Записи о несработавших селекторах."""
        return [entry for entry in self._entries if entry.level == NOT_FOUND]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DiagnosticEntry]:
        return iter(list(self._entries))

    def attach(self, page: Page) -> None:
        """
        Подписывает журнал на события страницы.

        Args:
            page: Страница Playwright
        """
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)
        page.on("requestfailed", self._on_request_failed)
        logger.debug("Журнал диагностики подписан на события страницы")

    def _on_console(self, message: ConsoleMessage) -> None:
        location = message.location or {}
        text = (
            f"{message.text} "
            f"({location.get('url', '')}:{location.get('lineNumber', '')})"
        )
        entry = self.append(message.type, text)

        log_level = logging.WARNING if entry.is_problem else logging.DEBUG
        logger.log(log_level, entry.line)

    def _on_page_error(self, error: PlaywrightError) -> None:
        entry = self.append("error", f"Uncaught Error: {error.message}")
        logger.warning(entry.line)

    def _on_request_failed(self, request: Request) -> None:
        failure = request.failure or "unknown error"
        entry = self.append("error", f"Failed Request: {request.url} - {failure}")
        logger.warning(entry.line)
