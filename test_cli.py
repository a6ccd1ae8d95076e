"""
Тесты команды ``browser``.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from browser_automation.browser.controller import (
    ElementNotFoundError,
    LoginResult,
    NavigationTimeoutError,
    StepOutcome,
)
from browser_automation.config import Config
from browser_automation.ui.cli import (
    MissingArgumentError,
    UnsupportedActionError,
    build_parser,
    run_cli,
    validate_args,
)


URL = "https://poker.example.com"


@pytest.fixture
def config(fast_config):
    return Config(browser=fast_config, google_api_key="test-key", keep_open=0)


@pytest.fixture
def tools():
    """Мок BrowserAutomation внутри CLI."""
    with patch("browser_automation.ui.cli.BrowserAutomation") as mock_class:
        instance = MagicMock()
        instance.start = AsyncMock()
        instance.stop = AsyncMock()
        instance.navigate = AsyncMock(return_value=URL)
        instance.click = AsyncMock(return_value='button:has-text("JOIN")')
        instance.fill = AsyncMock(return_value='input[name="email"]')
        instance.login = AsyncMock(return_value=LoginResult())
        mock_class.return_value = instance
        instance.mock_class = mock_class
        yield instance


def _browser_args(*extra):
    return ["browser", "--url", URL, *extra]


class TestValidation:

    @pytest.mark.parametrize("extra, message", [
        (["--action", "click"], "Selector is required for click action"),
        (["--action", "type", "--selector", "email"], "Selector and value are required for type action"),
        (["--action", "login", "--username", "alice"], "Username and password are required for login action"),
    ])
    def test_missing_arguments(self, extra, message):
        args = build_parser().parse_args(_browser_args(*extra))

        with pytest.raises(MissingArgumentError, match=message):
            validate_args(args)

    def test_unsupported_action(self):
        args = build_parser().parse_args(_browser_args("--action", "scroll"))

        with pytest.raises(UnsupportedActionError, match="Unsupported action: scroll"):
            validate_args(args)

    def test_short_aliases(self):
        args = build_parser().parse_args(["browser", "-u", URL, "-a", "type", "-s", "email", "-v", "a@b.c"])

        assert (args.url, args.action, args.selector, args.value) == (URL, "type", "email", "a@b.c")


class TestRunCli:

    @pytest.mark.asyncio
    async def test_click_without_selector_exits_1(self, config, tools, capsys):
        code = await run_cli(_browser_args("--action", "click"), config)

        assert code == 1
        assert "Selector is required" in capsys.readouterr().err
        tools.mock_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_unsupported_action_exits_1(self, config, tools, capsys):
        code = await run_cli(_browser_args("--action", "scroll"), config)

        assert code == 1
        assert "Unsupported action: scroll" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_missing_api_key_exits_1(self, fast_config, tools, capsys):
        config = Config(browser=fast_config, google_api_key=None, keep_open=0)

        code = await run_cli(_browser_args("--action", "click", "--selector", "JOIN"), config)

        assert code == 1
        assert "GOOGLE_API_KEY environment variable is required" in capsys.readouterr().err
        tools.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_url_exits_1(self, config, tools):
        code = await run_cli(["browser", "--action", "click"], config)

        assert code == 1

    @pytest.mark.asyncio
    async def test_click_success(self, config, tools):
        code = await run_cli(_browser_args("--action", "click", "--selector", "JOIN"), config)

        assert code == 0
        tools.start.assert_awaited_once()
        tools.navigate.assert_awaited_once_with(URL)
        tools.click.assert_awaited_once_with("JOIN")
        tools.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_type_success(self, config, tools):
        code = await run_cli(
            _browser_args("--action", "type", "--selector", "email", "--value", "a@b.c"), config
        )

        assert code == 0
        tools.fill.assert_awaited_once_with("email", "a@b.c")

    @pytest.mark.asyncio
    async def test_navigation_failure_still_stops_browser(self, config, tools, capsys):
        tools.navigate.side_effect = NavigationTimeoutError("Page did not load within 100ms")

        code = await run_cli(_browser_args("--action", "click", "--selector", "JOIN"), config)

        assert code == 1
        assert "did not load" in capsys.readouterr().err
        tools.click.assert_not_awaited()
        tools.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_element_not_found_exits_1(self, config, tools, capsys):
        tools.click.side_effect = ElementNotFoundError("element 'JOIN'", ['button:has-text("JOIN")'])

        code = await run_cli(_browser_args("--action", "click", "--selector", "JOIN"), config)

        assert code == 1
        assert "Could not find element 'JOIN'" in capsys.readouterr().err
        tools.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_login_prints_steps_and_errors(self, config, tools, capsys):
        tools.login.return_value = LoginResult(
            steps=[
                StepOutcome("username field", 'input[name="username"]', True),
                StepOutcome("JOIN button", None, False, "not found"),
            ],
            diagnostics=["[ERROR] Uncaught Error: boom"],
        )

        code = await run_cli(
            _browser_args("--action", "login", "--username", "alice", "--password", "secret"), config
        )

        out = capsys.readouterr().out
        assert code == 0
        tools.login.assert_awaited_once_with("alice", "secret")
        assert "JOIN button" in out
        assert "[ERROR] Uncaught Error: boom" in out

    @pytest.mark.asyncio
    async def test_login_flow_file_is_passed_to_controller(self, fast_config, tools, tmp_path):
        flow_file = tmp_path / "flow.json"
        flow_file.write_text('{"submit": ["#go"]}', encoding="utf-8")
        config = Config(
            browser=fast_config, google_api_key="test-key", keep_open=0, login_flow_file=flow_file
        )

        code = await run_cli(
            _browser_args("--action", "login", "--username", "alice", "--password", "secret"), config
        )

        assert code == 0
        flow = tools.mock_class.call_args.kwargs["login_flow"]
        assert flow.submit == ("#go",)

    @pytest.mark.asyncio
    async def test_broken_flow_file_exits_1(self, fast_config, tools, tmp_path, capsys):
        config = Config(
            browser=fast_config, google_api_key="test-key", keep_open=0,
            login_flow_file=tmp_path / "missing.json",
        )

        code = await run_cli(
            _browser_args("--action", "login", "--username", "alice", "--password", "secret"), config
        )

        assert code == 1
        assert "not found" in capsys.readouterr().err
        tools.start.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content, message", [
        ('{"settle_delay": "fast"}', "settle_delay"),
        ('{"state_markers": "Pot"}', "state_markers"),
    ])
    async def test_invalid_flow_values_exit_1(self, fast_config, tools, tmp_path, capsys, content, message):
        flow_file = tmp_path / "flow.json"
        flow_file.write_text(content, encoding="utf-8")
        config = Config(
            browser=fast_config, google_api_key="test-key", keep_open=0, login_flow_file=flow_file
        )

        code = await run_cli(
            _browser_args("--action", "login", "--username", "alice", "--password", "secret"), config
        )

        assert code == 1
        assert message in capsys.readouterr().err
        tools.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flow_path_is_directory_exits_1(self, fast_config, tools, tmp_path, capsys):
        config = Config(
            browser=fast_config, google_api_key="test-key", keep_open=0, login_flow_file=tmp_path
        )

        code = await run_cli(
            _browser_args("--action", "login", "--username", "alice", "--password", "secret"), config
        )

        assert code == 1
        assert "Cannot read login flow file" in capsys.readouterr().err
