"""
Конфигурация приложения.

Модуль содержит настройки браузерной автоматизации,
загружаемые из переменных окружения (и .env файла).
"""

import os
from pathlib import Path
from typing import Literal, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

from .constants import Timeouts, Delays

# Загружаем переменные окружения из .env файла
load_dotenv()


class ConfigError(Exception):
    """Некорректное значение переменной окружения."""
    pass


def _int_env(name: str, default: int) -> int:
    """Читает целое число из переменной окружения."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got '{raw}'") from e


@dataclass
class BrowserConfig:
    """Конфигурация браузера и таймингов взаимодействия."""

    # Тип браузера: chromium, firefox или webkit
    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"

    # Запускать браузер в headless режиме (без UI)
    headless: bool = False

    # Открывать DevTools на каждой вкладке (только chromium)
    devtools: bool = True

    # Размер viewport
    viewport_width: int = 1280
    viewport_height: int = 720

    # Ожидание network idle после навигации (мс)
    navigation_timeout: int = Timeouts.NETWORK_IDLE

    # Пауза после загрузки страницы (мс)
    settle_delay: int = Delays.SETTLE

    # Таймаут ожидания одного кандидата-селектора для click/fill (мс)
    candidate_timeout: int = Timeouts.CANDIDATE

    # Таймаут кандидата внутри login() (мс)
    login_candidate_timeout: int = Timeouts.LOGIN_CANDIDATE

    # Задержка между символами при вводе текста (мс)
    type_delay: int = Delays.TYPE_CHAR

    # Пауза между очисткой поля и вводом (мс)
    clear_delay: int = Delays.CLEAR

    # Пауза наблюдения за консолью в конце login() (мс)
    observe_delay: int = Delays.OBSERVE


@dataclass
class Config:
    """Основная конфигурация приложения."""

    browser: BrowserConfig = field(default_factory=BrowserConfig)

    # Уровень логирования
    log_level: str = "INFO"

    # API ключ, обязателен для запуска CLI
    google_api_key: Optional[str] = None

    # Сколько держать браузер открытым после последнего действия (мс)
    keep_open: int = Delays.KEEP_OPEN

    # JSON файл с описанием сценария логина (None - встроенный сценарий)
    login_flow_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Config":
        """
        Создаёт конфигурацию из переменных окружения.

        Returns:
            Config: Объект конфигурации с настройками из .env

        Raises:
            ConfigError: Если числовая переменная не является числом
        """
        browser_config = BrowserConfig(
            browser_type=os.getenv("BROWSER_TYPE", "chromium"),
            headless=os.getenv("HEADLESS", "false").lower() == "true",
            devtools=os.getenv("DEVTOOLS", "true").lower() == "true",
            viewport_width=_int_env("VIEWPORT_WIDTH", 1280),
            viewport_height=_int_env("VIEWPORT_HEIGHT", 720),
            navigation_timeout=_int_env("NAVIGATION_TIMEOUT", Timeouts.NETWORK_IDLE),
            settle_delay=_int_env("SETTLE_DELAY", Delays.SETTLE),
            candidate_timeout=_int_env("CANDIDATE_TIMEOUT", Timeouts.CANDIDATE),
            login_candidate_timeout=_int_env("LOGIN_CANDIDATE_TIMEOUT", Timeouts.LOGIN_CANDIDATE),
            type_delay=_int_env("TYPE_DELAY", Delays.TYPE_CHAR),
            observe_delay=_int_env("OBSERVE_DELAY", Delays.OBSERVE),
        )

        flow_file = os.getenv("LOGIN_FLOW_FILE")

        return cls(
            browser=browser_config,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            keep_open=_int_env("KEEP_OPEN", Delays.KEEP_OPEN),
            login_flow_file=Path(flow_file) if flow_file else None,
        )


# Глобальный экземпляр конфигурации
_config: Config | None = None


def get_config() -> Config:
    """
    Получает глобальный экземпляр конфигурации.

    Returns:
        Config: Объект конфигурации
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Сбрасывает глобальную конфигурацию (для тестов)."""
    global _config
    _config = None
