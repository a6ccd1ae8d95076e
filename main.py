"""
browser-automation - автоматизация браузера через Playwright.

Запуск:
    python main.py browser --url https://example.com --action click --selector "Sign In"
    python main.py browser --url https://example.com --action login --username alice --password secret

Требования:
    - Python 3.10+
    - Установленные зависимости: pip install -e .
    - Playwright: playwright install chromium
    - GOOGLE_API_KEY в окружении или .env файле
"""

import asyncio
import sys
import logging
from pathlib import Path

# Добавляем корневую директорию в путь
ROOT_DIR = Path(__file__).parent
sys.path.insert(0, str(ROOT_DIR))

from rich.console import Console
from rich.markup import escape

from browser_automation.config import ConfigError, get_config
from browser_automation.ui.cli import run_cli


# Настройка логирования
def setup_logging(level: str = "INFO") -> None:
    """Настраивает логирование."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Уменьшаем шум от библиотек
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)


async def main() -> int:
    """Точка входа в приложение."""
    try:
        config = get_config()
    except ConfigError as e:
        Console(stderr=True).print(f"[bold red]Error:[/bold red] {escape(str(e))}", soft_wrap=True)
        return 1

    setup_logging(config.log_level)

    return await run_cli(sys.argv[1:], config)


def run() -> None:
    """Синхронная обёртка для запуска."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        print("\nВыход...")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
