"""
Browser automation module.

Модуль браузерной автоматизации с использованием Playwright.
Включает контроллер сессии, журнал диагностики и шаблоны селекторов.
"""

from .controller import (
    BrowserAutomation,
    BrowserError,
    ElementNotFoundError,
    LoginResult,
    NavigationError,
    NavigationTimeoutError,
    NotInitializedError,
    StepOutcome,
)
from .diagnostics import DiagnosticEntry, DiagnosticLog
from .flows import DEFAULT_LOGIN_FLOW, FlowConfigError, FlowStep, LoginFlow, load_login_flow
from .selectors import click_candidates, fill_candidates

__all__ = [
    "BrowserAutomation",
    "BrowserError",
    "ElementNotFoundError",
    "LoginResult",
    "NavigationError",
    "NavigationTimeoutError",
    "NotInitializedError",
    "StepOutcome",
    "DiagnosticEntry",
    "DiagnosticLog",
    "DEFAULT_LOGIN_FLOW",
    "FlowConfigError",
    "FlowStep",
    "LoginFlow",
    "load_login_flow",
    "click_candidates",
    "fill_candidates",
]
