"""
UI модуль browser-automation.

Содержит CLI интерфейс (команда ``browser``).
"""

from .cli import CLI, run_cli

__all__ = [
    "CLI",
    "run_cli",
]
