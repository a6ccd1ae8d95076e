"""
Описание сценария логина.

Данные, специфичные для целевого приложения (списки селекторов,
шаги после входа), отделены от логики перебора кандидатов и могут
загружаться из JSON файла.
"""

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Tuple

from ..constants import Delays
from .selectors import Candidates, text_button_candidates


logger = logging.getLogger(__name__)


class FlowConfigError(Exception):
    """Некорректное описание сценария."""
    pass


@dataclass(frozen=True)
class FlowStep:
    """
    Один необязательный шаг после отправки формы логина.

    Attributes:
        name: Имя шага для логов и отчёта
        candidates: Кандидаты-селекторы в порядке приоритета
        action: click или fill
        value: Значение для fill
        wait_before: Пауза перед шагом (мс)
        wait_after: Пауза после успешного шага (мс)
    """

    name: str
    candidates: Candidates
    action: Literal["click", "fill"] = "click"
    value: Optional[str] = None
    wait_before: int = 0
    wait_after: int = 0


@dataclass(frozen=True)
class LoginFlow:
    """Кандидаты полей логина и шаги после входа."""

    username: Candidates
    password: Candidates
    submit: Candidates
    steps: Tuple[FlowStep, ...] = ()
    settle_delay: int = Delays.SETTLE
    state_markers: Tuple[str, ...] = ()


DEFAULT_LOGIN_FLOW = LoginFlow(
    username=(
        'input[name="username"]',
        'input[placeholder*="username"]',
        'input[type="text"]',
        '[aria-label*="username"]',
    ),
    password=(
        'input[name="password"]',
        'input[placeholder*="password"]',
        'input[type="password"]',
        '[aria-label*="password"]',
    ),
    submit=(
        'button:has-text("Log In")',
        'button:has-text("Login")',
        'button:has-text("Sign In")',
        '[type="submit"]',
    ),
    steps=(
        FlowStep(
            name="JOIN button",
            candidates=text_button_candidates("JOIN", "Join"),
            wait_after=5000,
        ),
        FlowStep(
            name="Start New Hand button",
            candidates=text_button_candidates("Start New Hand", "START NEW HAND"),
        ),
        FlowStep(
            name="game action button",
            candidates=text_button_candidates("CALL", "CHECK", "FOLD", "RAISE"),
            wait_before=5000,
            wait_after=2000,
        ),
        FlowStep(
            name="bet slider",
            candidates=('input[type="range"]',),
            action="fill",
            value="50",
            wait_after=2000,
        ),
    ),
    state_markers=("$", "Chips", "Pot"),
)


def _candidates(raw: Any, key: str) -> Candidates:
    if not isinstance(raw, list) or not raw or not all(isinstance(s, str) for s in raw):
        raise FlowConfigError(f"'{key}' must be a non-empty list of selectors")
    return tuple(raw)


def _markers(raw: Any) -> Tuple[str, ...]:
    if not isinstance(raw, list) or not all(isinstance(s, str) for s in raw):
        raise FlowConfigError("'state_markers' must be a list of strings")
    return tuple(raw)


def _millis(raw: Any, key: str) -> int:
    """Приводит паузу в мс к int."""
    if isinstance(raw, bool):
        raise FlowConfigError(f"'{key}' must be a number of milliseconds, got {raw!r}")
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        raise FlowConfigError(f"'{key}' must be a number of milliseconds, got {raw!r}") from e
    if value < 0:
        raise FlowConfigError(f"'{key}' must not be negative, got {value}")
    return value


def _step_from_dict(raw: Dict[str, Any]) -> FlowStep:
    if not isinstance(raw, dict) or "name" not in raw:
        raise FlowConfigError("Every step needs a 'name'")

    action = raw.get("action", "click")
    if action not in ("click", "fill"):
        raise FlowConfigError(f"Step '{raw['name']}': unknown action '{action}'")
    if action == "fill" and raw.get("value") is None:
        raise FlowConfigError(f"Step '{raw['name']}': fill requires a 'value'")

    return FlowStep(
        name=raw["name"],
        candidates=_candidates(raw.get("candidates"), f"{raw['name']}.candidates"),
        action=action,
        value=raw.get("value"),
        wait_before=_millis(raw.get("wait_before", 0), f"{raw['name']}.wait_before"),
        wait_after=_millis(raw.get("wait_after", 0), f"{raw['name']}.wait_after"),
    )


def flow_from_dict(data: Dict[str, Any], base: LoginFlow = DEFAULT_LOGIN_FLOW) -> LoginFlow:
    """
    Строит сценарий из словаря, недостающие ключи берутся из ``base``.

    Args:
        data: Разобранный JSON
        base: Сценарий со значениями по умолчанию

    Returns:
        LoginFlow: Новый сценарий

    Raises:
        FlowConfigError: Если структура некорректна
    """
    if not isinstance(data, dict):
        raise FlowConfigError("Login flow must be a JSON object")

    overrides: Dict[str, Any] = {}
    for key in ("username", "password", "submit"):
        if key in data:
            overrides[key] = _candidates(data[key], key)

    if "steps" in data:
        if not isinstance(data["steps"], list):
            raise FlowConfigError("'steps' must be a list")
        overrides["steps"] = tuple(_step_from_dict(step) for step in data["steps"])

    if "settle_delay" in data:
        overrides["settle_delay"] = _millis(data["settle_delay"], "settle_delay")

    if "state_markers" in data:
        overrides["state_markers"] = _markers(data["state_markers"])

    return replace(base, **overrides)


def load_login_flow(path: Path) -> LoginFlow:
    """
    Загружает сценарий логина из JSON файла.

    Args:
        path: Путь к файлу

    Returns:
        LoginFlow: Загруженный сценарий

    Raises:
        FlowConfigError: Если файл не найден, не читается или повреждён
    """
    path = Path(path)
    logger.info(f"Загрузка сценария логина: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise FlowConfigError(f"Login flow file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise FlowConfigError(f"Login flow file is not valid JSON: {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise FlowConfigError(f"Login flow file is not UTF-8 text: {path}") from e
    except OSError as e:
        raise FlowConfigError(f"Cannot read login flow file {path}: {e.strerror or e}") from e

    return flow_from_dict(data)
