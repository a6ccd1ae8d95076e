"""
Шаблоны кандидатов-селекторов.

Порядок в списке задаёт приоритет: самые точные селекторы первыми,
общие fallback-селекторы последними.
"""

from typing import Tuple


Candidates = Tuple[str, ...]


def _quote(value: str) -> str:
    """Экранирует значение для подстановки в кавычки селектора."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def click_candidates(description: str) -> Candidates:
    """
    Кандидаты для клика по описанию элемента.

    Args:
        description: Текст кнопки/ссылки или готовый селектор

    Returns:
        Candidates: Упорядоченный список селекторов
    """
    quoted = _quote(description)
    return (
        f'button:has-text("{quoted}")',
        f'[role="button"]:has-text("{quoted}")',
        f'a:has-text("{quoted}")',
        f"text={description}",
        'button[type="submit"]',
        description,
    )


def fill_candidates(description: str) -> Candidates:
    """
    Кандидаты для ввода текста по описанию поля.

    Сначала placeholder, затем type/name/id, затем любые
    текстовые поля и, наконец, само описание как селектор.

    Args:
        description: Placeholder, name, id поля или готовый селектор

    Returns:
        Candidates: Упорядоченный список селекторов
    """
    quoted = _quote(description)
    return (
        f'input[placeholder="{quoted}"]',
        f'input[type="{quoted}"]',
        f'input[name="{quoted}"]',
        f"#{description}",
        'input[type="text"]',
        'input[type="password"]',
        description,
    )


def text_button_candidates(*labels: str) -> Candidates:
    """
    Кнопки с любым из текстов: сначала ``<button>``, затем ``role=button``.

    Example:
        ``text_button_candidates("JOIN", "Join")``
    """
    buttons = [f'button:has-text("{_quote(label)}")' for label in labels]
    roles = [f'[role="button"]:has-text("{_quote(label)}")' for label in labels]
    return tuple(buttons + roles)
