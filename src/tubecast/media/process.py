"""Bounded subprocess execution for the external media tools.

Commands are always argument lists, never shell strings. Each call has a
wall-clock timeout after which the process is killed, and captured output is
capped so a misbehaving tool cannot exhaust memory.
"""

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class ToolError(Exception):
    """An external tool failed, timed out, or could not be started."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ToolTimeoutError(ToolError):
    """An external tool exceeded its wall-clock limit."""

    pass


@dataclass
class ToolResult:
    """Captured result of a finished tool invocation."""

    args: list[str]
    returncode: int
    stdout: bytes
    stderr: bytes
    stdout_truncated: bool = False

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace").strip()


async def _read_bounded(stream: asyncio.StreamReader | None, limit: int) -> tuple[bytes, bool]:
    """Read a stream to EOF, keeping at most ``limit`` bytes."""
    if stream is None:
        return b"", False

    kept = bytearray()
    truncated = False
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        room = limit - len(kept)
        if room > 0:
            kept.extend(chunk[:room])
        if len(chunk) > room:
            truncated = True
    return bytes(kept), truncated


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


def _tail(text: str, lines: int = 5) -> str:
    return "\n".join(text.splitlines()[-lines:])


async def run_tool(
    args: list[str],
    timeout: float,
    max_output_bytes: int,
) -> ToolResult:
    """Run an external tool and capture its output.

    Args:
        args: Executable followed by its arguments
        timeout: Wall-clock limit in seconds
        max_output_bytes: Cap on captured bytes per stream

    Returns:
        ToolResult with captured stdout/stderr

    Raises:
        ToolTimeoutError: If the process outlives ``timeout``
        ToolError: If the process cannot start or exits non-zero
    """
    logger.debug("Running %s", args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolError(f"Could not start {args[0]}: {e}") from e

    async def collect() -> tuple[tuple[bytes, bool], tuple[bytes, bool]]:
        out, err = await asyncio.gather(
            _read_bounded(proc.stdout, max_output_bytes),
            _read_bounded(proc.stderr, max_output_bytes),
        )
        await proc.wait()
        return out, err

    try:
        (stdout, stdout_truncated), (stderr, _) = await asyncio.wait_for(collect(), timeout)
    except asyncio.TimeoutError:
        await _kill(proc)
        raise ToolTimeoutError(f"{args[0]} timed out after {timeout:g}s") from None
    except asyncio.CancelledError:
        await _kill(proc)
        raise

    result = ToolResult(
        args=list(args),
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout,
        stderr=stderr,
        stdout_truncated=stdout_truncated,
    )

    if result.returncode != 0:
        raise ToolError(
            f"{args[0]} exited with status {result.returncode}: {_tail(result.stderr_text)}",
            returncode=result.returncode,
            stderr=result.stderr_text,
        )
    return result
