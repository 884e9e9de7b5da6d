"""
Confirmation port with a bounded wait.

Callers ask a question and get a bool back. If nobody answers within the
timeout the answer is "no", and nothing has been mutated yet.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Protocol

import click

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class ConfirmationPort(Protocol):
    """Asks the user to approve an operation."""

    async def confirm(self, message: str) -> bool:
        ...


class StaticConfirmation:
    """Always give the same answer (``--yes`` and tests)."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.asked: list[str] = []

    async def confirm(self, message: str) -> bool:
        self.asked.append(message)
        return self.answer


class ConsoleConfirmation:
    """Prompt on the terminal.

    The prompt runs on a daemon thread so an unanswered prompt never keeps
    the process alive once the wait has timed out.
    """

    def __init__(self, prompt_suffix: str = " [y/N] "):
        self.prompt_suffix = prompt_suffix

    async def confirm(self, message: str) -> bool:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[bool] = loop.create_future()

        def _settle(value: bool | None, error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(bool(value))

        def _deliver(value: bool | None, error: BaseException | None) -> None:
            try:
                loop.call_soon_threadsafe(_settle, value, error)
            except RuntimeError:
                # loop already closed after a timeout
                pass

        def _ask() -> None:
            try:
                answer = click.confirm(message, default=False, prompt_suffix=self.prompt_suffix)
            except click.Abort:
                answer = False
            except Exception as e:
                _deliver(None, e)
                return
            _deliver(answer, None)

        threading.Thread(target=_ask, name="crosspath-confirm", daemon=True).start()
        return await future


async def confirm_with_timeout(
    port: ConfirmationPort,
    message: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> bool:
    """Ask ``port``; a missing answer after ``timeout`` seconds means decline."""
    try:
        return await asyncio.wait_for(port.confirm(message), timeout=timeout)
    except asyncio.TimeoutError:
        logger.info("No confirmation within %.1fs, declining", timeout)
        return False
