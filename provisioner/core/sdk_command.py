import asyncio
import codecs
import logging
from enum import Enum
from typing import List, Optional, Sequence

from provisioner.config import (
    HARDWARE_PROFILE_ANSWER,
    HARDWARE_PROFILE_PROMPT,
    LICENSE_ANSWER,
    LICENSE_PROMPT,
)
from provisioner.utils.android_path_utils import get_sdk_tool_path

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class StdioMode(Enum):
    INHERIT = "inherit"  # The tool talks straight to our terminal
    PIPE = "pipe"  # We read the tool's output (and may answer its prompts)


class ProcessSpawnError(Exception):
    """The SDK tool could not be started at all."""

    def __init__(self, argv: Sequence[str], cause: BaseException):
        self.argv = list(argv)
        self.cause = cause
        super().__init__(f"Could not start {' '.join(self.argv)}: {cause}")


class ProcessExitError(Exception):
    """The SDK tool ran but exited with a non-zero status."""

    def __init__(self, argv: Sequence[str], exit_code: int):
        self.argv = list(argv)
        self.exit_code = exit_code
        super().__init__(f"{' '.join(self.argv)} exited with code {exit_code}")


class ResponderState(Enum):
    WAITING = "waiting"
    ANSWERED = "answered"


class PromptResponder:
    """
    Answers one interactive question printed by a child process.

    Output is fed in chunks as it arrives. The responder buffers enough of it to find a
    question split across chunks, and when the question shows up it returns the answer
    line to write to the child's stdin. It then moves to ANSWERED and goes back to
    WAITING on the next chunk, since the SDK tool repeats some questions (one license
    prompt per package).
    """

    def __init__(self, question: str, answer: str):
        self.question = question
        self.answer = answer
        self.state = ResponderState.WAITING
        self.times_answered = 0
        self._buffer = ""

    def feed(self, chunk: str) -> Optional[str]:
        """
        Scan a chunk of output.

        Args:
            chunk: Decoded output from the child process

        Returns:
            Optional[str]: The answer followed by a newline, or None if nothing to answer
        """
        if self.state is ResponderState.ANSWERED:
            self.state = ResponderState.WAITING

        self._buffer += chunk
        if self.question in self._buffer:
            # Text after the question may already hold the start of the next one
            end = self._buffer.index(self.question) + len(self.question)
            self._buffer = self._buffer[end:]
            self.state = ResponderState.ANSWERED
            self.times_answered += 1
            return self.answer + "\n"

        # Only a partial question can still complete with the next chunk
        keep = len(self.question) - 1
        self._buffer = self._buffer[-keep:] if keep > 0 else ""
        return None


def license_responder() -> PromptResponder:
    return PromptResponder(LICENSE_PROMPT, LICENSE_ANSWER)


def hardware_profile_responder() -> PromptResponder:
    return PromptResponder(HARDWARE_PROFILE_PROMPT, HARDWARE_PROFILE_ANSWER)


async def _pump_output(process: asyncio.subprocess.Process, responder: Optional[PromptResponder]) -> None:
    """Read the child's output until EOF, answering prompts along the way."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    while True:
        chunk = await process.stdout.read(READ_CHUNK_SIZE)
        if not chunk:
            break

        text = decoder.decode(chunk)
        if text.strip():
            logger.debug(f"SDK output: {text.rstrip()}")

        if responder is None:
            continue

        reply = responder.feed(text)
        if reply is None:
            continue

        logger.debug(f"Answering {responder.question!r} with {responder.answer!r}")
        try:
            process.stdin.write(reply.encode("utf-8"))
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # The exit status decides the outcome
            logger.debug("SDK command closed its input before the answer was written")

    if process.stdin is not None:
        process.stdin.close()


async def run_sdk_command(
    sdk_path: str,
    cmd: str,
    args: List[str],
    stdio: StdioMode = StdioMode.INHERIT,
    responder: Optional[PromptResponder] = None,
) -> None:
    """
    Run a command of the Android SDK tool at <sdk>/tools/android.

    Args:
        sdk_path: Android SDK root
        cmd: Subcommand, e.g. "update", "create" or "delete"
        args: Arguments following the subcommand
        stdio: Whether the tool inherits our terminal or is piped through us
        responder: Answers an interactive question; forces piped I/O

    Raises:
        ProcessSpawnError: If the tool could not be started
        ProcessExitError: If the tool exited with a non-zero status
    """
    argv = [get_sdk_tool_path(sdk_path), cmd] + list(args)
    piped = stdio is StdioMode.PIPE or responder is not None

    if piped:
        stdin = asyncio.subprocess.PIPE if responder else asyncio.subprocess.DEVNULL
        stdout, stderr = asyncio.subprocess.PIPE, asyncio.subprocess.STDOUT
    else:
        stdin = stdout = stderr = None

    logger.debug(f"Running SDK command: {' '.join(argv)}")
    try:
        process = await asyncio.create_subprocess_exec(*argv, stdin=stdin, stdout=stdout, stderr=stderr)
    except OSError as e:
        raise ProcessSpawnError(argv, e) from e

    if piped:
        await _pump_output(process, responder)

    exit_code = await process.wait()
    if exit_code != 0:
        raise ProcessExitError(argv, exit_code)
