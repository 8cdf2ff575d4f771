"""Tests for bounded subprocess execution."""

import sys
import time

import pytest

from tubecast.media.process import ToolError, ToolTimeoutError, run_tool


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestRunTool:
    """Tests for run_tool."""

    @pytest.mark.asyncio
    async def test_captures_output(self) -> None:
        result = await run_tool(
            _python("import sys; print('out'); print('err', file=sys.stderr)"),
            timeout=30,
            max_output_bytes=1024,
        )

        assert result.returncode == 0
        assert result.stdout.strip() == b"out"
        assert result.stderr_text == "err"
        assert not result.stdout_truncated

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self) -> None:
        with pytest.raises(ToolError) as exc_info:
            await run_tool(
                _python("import sys; print('bad input', file=sys.stderr); sys.exit(3)"),
                timeout=30,
                max_output_bytes=1024,
            )

        assert exc_info.value.returncode == 3
        assert "bad input" in exc_info.value.stderr
        assert "status 3" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self) -> None:
        """Test that a hung tool is killed at the wall-clock limit."""
        started = time.monotonic()

        with pytest.raises(ToolTimeoutError):
            await run_tool(
                _python("import time; time.sleep(30)"), timeout=0.5, max_output_bytes=1024
            )

        assert time.monotonic() - started < 10

    @pytest.mark.asyncio
    async def test_output_is_capped(self) -> None:
        result = await run_tool(
            _python("import sys; sys.stdout.write('x' * 100000)"),
            timeout=30,
            max_output_bytes=1000,
        )

        assert len(result.stdout) == 1000
        assert result.stdout_truncated

    @pytest.mark.asyncio
    async def test_missing_executable(self) -> None:
        with pytest.raises(ToolError, match="Could not start"):
            await run_tool(["/nonexistent/tool-binary"], timeout=5, max_output_bytes=1024)

    @pytest.mark.asyncio
    async def test_arguments_are_not_shell_interpreted(self) -> None:
        result = await run_tool(
            _python("import sys; print(sys.argv[1])") + ["$(echo hi); echo injected"],
            timeout=30,
            max_output_bytes=1024,
        )
        assert result.stdout.strip() == b"$(echo hi); echo injected"
