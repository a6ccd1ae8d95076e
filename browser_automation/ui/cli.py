"""
CLI - командный интерфейс для browser-automation.

Команда ``browser`` открывает страницу и выполняет одно действие:
click, type или login. Вывод оформляется через rich.
"""

import argparse
import asyncio
import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from ..browser.controller import BrowserAutomation, BrowserError, LoginResult
from ..browser.flows import FlowConfigError, LoginFlow, load_login_flow
from ..config import Config, get_config

logger = logging.getLogger(__name__)


VERSION = "1.0.0"

ACTIONS = ("click", "type", "login")


class CLIError(Exception):
    """Ошибка аргументов командной строки."""
    pass


class MissingArgumentError(CLIError):
    """Для выбранного действия не передан обязательный флаг."""
    pass


class UnsupportedActionError(CLIError):
    """Неизвестное действие."""
    pass


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser, завершающийся с кодом 1 вместо 2."""

    def error(self, message: str) -> None:
        self.print_usage()
        self.exit(1, f"Error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Создаёт парсер с единственной командой ``browser``."""
    parser = _ArgumentParser(
        prog="browser-automation",
        description="Browser automation with selector fallback chains",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    commands = parser.add_subparsers(dest="command", required=True)
    browser = commands.add_parser("browser", help="Browser automation commands")
    browser.add_argument("-u", "--url", required=True, help="URL to navigate to")
    browser.add_argument(
        "-a", "--action", required=True,
        help=f"Action to perform ({', '.join(ACTIONS)})"
    )
    browser.add_argument("-s", "--selector", help="Element selector or description")
    browser.add_argument("-v", "--value", help="Value for type action")
    browser.add_argument("--username", help="Username for login action")
    browser.add_argument("--password", help="Password for login action")
    return parser


def validate_args(args: argparse.Namespace) -> None:
    """
    Проверяет, что для действия переданы все нужные флаги.

    Raises:
        MissingArgumentError: Не хватает флага
        UnsupportedActionError: Неизвестное действие
    """
    if args.action == "click":
        if not args.selector:
            raise MissingArgumentError("Selector is required for click action")
    elif args.action == "type":
        if not args.selector or not args.value:
            raise MissingArgumentError("Selector and value are required for type action")
    elif args.action == "login":
        if not args.username or not args.password:
            raise MissingArgumentError("Username and password are required for login action")
    else:
        raise UnsupportedActionError(f"Unsupported action: {args.action}")


class CLI:
    """
    Выполняет одну команду ``browser``.

    Сессия браузера закрывается на любом пути выхода.
    """

    def __init__(self, config: Optional[Config] = None, console: Optional[Console] = None):
        self.config = config or get_config()
        self.console = console or Console()
        self.error_console = Console(stderr=True)

    def _print_error(self, message: str) -> None:
        self.error_console.print(f"[bold red]Error:[/bold red] {escape(message)}", soft_wrap=True)

    async def execute(self, args: argparse.Namespace) -> int:
        """
        Проверяет окружение и аргументы, затем выполняет действие.

        Returns:
            int: Код выхода (0 - успех, 1 - ошибка)
        """
        if not self.config.google_api_key:
            self._print_error("GOOGLE_API_KEY environment variable is required")
            return 1

        try:
            validate_args(args)
            flow = self._load_flow() if args.action == "login" else None
        except (CLIError, FlowConfigError) as e:
            self._print_error(str(e))
            return 1

        tools = BrowserAutomation(self.config.browser, login_flow=flow)
        try:
            self.console.print("[dim]Initializing browser...[/dim]")
            await tools.start()
            await tools.navigate(args.url)
            self.console.print(f"[cyan]●[/cyan] [bold]Page loaded:[/bold] {escape(args.url)}")

            await self._perform(tools, args)

            # Браузер остаётся открытым ещё немного после последнего действия
            await asyncio.sleep(self.config.keep_open / 1000)
            self.console.print("[green]✓ Action executed successfully[/green]")
            return 0

        except BrowserError as e:
            self._print_error(str(e))
            return 1
        except Exception as e:
            self._print_error(str(e) or type(e).__name__)
            logger.exception("Неожиданная ошибка выполнения действия")
            return 1
        finally:
            await tools.stop()

    def _load_flow(self) -> Optional[LoginFlow]:
        if self.config.login_flow_file is None:
            return None
        return load_login_flow(self.config.login_flow_file)

    async def _perform(self, tools: BrowserAutomation, args: argparse.Namespace) -> None:
        match args.action:
            case "click":
                selector = await tools.click(args.selector)
                self.console.print(f"[cyan]●[/cyan] [bold]Clicked[/bold] {escape(selector)}")

            case "type":
                selector = await tools.fill(args.selector, args.value)
                self.console.print(f"[cyan]●[/cyan] [bold]Typed into[/bold] {escape(selector)}")

            case "login":
                result = await tools.login(args.username, args.password)
                self._print_login_result(result)

    def _print_login_result(self, result: LoginResult) -> None:
        """Выводит таблицу шагов и проблемы из консоли страницы."""
        table = Table(title="Login steps", box=box.ROUNDED, header_style="bold cyan")
        table.add_column("Step", style="cyan")
        table.add_column("Status")
        table.add_column("Selector", style="dim")

        for step in result.steps:
            status = "[green]✓ done[/green]" if step.ok else "[yellow]– skipped[/yellow]"
            table.add_row(escape(step.name), status, escape(step.selector or "—"))

        self.console.print()
        self.console.print(table)

        for text in result.state_texts:
            self.console.print(f"[dim]State:[/dim] {escape(text)}")

        if not result.diagnostics:
            self.console.print("\n[green]No errors found during the session[/green]")
            return

        self.console.print("\n[bold]Found errors during the session:[/bold]")
        for line in result.diagnostics:
            style = "yellow" if line.startswith("[WARNING]") else "red"
            self.console.print(f"[{style}]{escape(line)}[/{style}]")


async def run_cli(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    """
    Разбирает аргументы и выполняет команду.

    Args:
        argv: Аргументы командной строки (по умолчанию sys.argv[1:])
        config: Конфигурация (по умолчанию из окружения)

    Returns:
        int: Код выхода
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)

    cli = CLI(config=config)
    return await cli.execute(args)
