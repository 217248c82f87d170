"""
Cooperative cancellation for pipeline runs.

A CancellationToken is passed explicitly into every stage and batch loop
and checked at defined points (start of each task, each batch).
"""

import asyncio
from typing import Optional


class PipelineCancelled(Exception):
    """Raised at a check point once cancellation has been requested"""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(reason or "Pipeline cancelled")
        self.reason = reason


class CancellationToken:
    """
    Example:
        token = CancellationToken()
        task = asyncio.create_task(pipeline.run(config, cancel_token=token))
        token.cancel("user request")
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelled(self.reason)

    async def wait(self) -> None:
        await self._event.wait()
