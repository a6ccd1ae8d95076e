"""
browser-automation - автоматизация браузера через Playwright.

Этот модуль предоставляет контроллер сессии браузера с перебором
кандидатов-селекторов и сбором диагностики страницы.
"""

from .config import Config, BrowserConfig, ConfigError

# Browser module
from .browser import (
    BrowserAutomation,
    BrowserError,
    DiagnosticLog,
    ElementNotFoundError,
    LoginFlow,
    LoginResult,
    NavigationError,
    NavigationTimeoutError,
    NotInitializedError,
)

# UI module
from .ui import CLI, run_cli

__version__ = "1.0.0"
__all__ = [
    # Config
    "Config",
    "BrowserConfig",
    "ConfigError",
    # Browser
    "BrowserAutomation",
    "BrowserError",
    "DiagnosticLog",
    "ElementNotFoundError",
    "LoginFlow",
    "LoginResult",
    "NavigationError",
    "NavigationTimeoutError",
    "NotInitializedError",
    # UI
    "CLI",
    "run_cli",
]
