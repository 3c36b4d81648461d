# =========================
# FILE: recipe_engine/infrastructure/session_store.py
# Pending interactive resolutions (one per suspended resolver call)
# =========================
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from recipe_engine.application.prompts import ChoicePrompt, ChoiceRequest

log = logging.getLogger("infra.session_store")

# ("choice", ChoiceRequest) | ("outcome", Any) | ("error", str)
Event = Tuple[str, Any]
Runner = Callable[[ChoicePrompt], Awaitable[Any]]


@dataclass
class PendingResolution:
    request_id: str
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    awaiting: Optional[ChoiceRequest] = None
    task: Optional["asyncio.Task[None]"] = None
    events: "asyncio.Queue[Event]" = field(default_factory=asyncio.Queue)
    answer: Optional["asyncio.Future[str]"] = None


class InMemoryResolutionStore:
    """
    Keeps resolver coroutines alive between HTTP calls.

    The resolver runs as a task; its prompt callback publishes a "choice"
    event and waits on a future that ``answer`` completes. Every public call
    returns the next event: another choice, the outcome, or an error.

    A prompt has no timeout of its own. Only with a positive ``ttl_seconds``
    are resolutions left untouched that long cancelled and forgotten.
    """

    def __init__(self, ttl_seconds: int = 0) -> None:
        self.ttl_seconds = ttl_seconds
        self._data: Dict[str, PendingResolution] = {}

    def __len__(self) -> int:
        return len(self._data)

    async def start(self, runner: Runner) -> Tuple[str, Event]:
        self._gc()
        st = PendingResolution(request_id=uuid.uuid4().hex)
        self._data[st.request_id] = st

        async def prompt(request: ChoiceRequest) -> str:
            st.answer = asyncio.get_running_loop().create_future()
            st.awaiting = request
            await st.events.put(("choice", request))
            return await st.answer

        async def run() -> None:
            try:
                outcome = await runner(prompt)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.exception("Resolution %s failed", st.request_id)
                await st.events.put(("error", str(e)))
                return
            await st.events.put(("outcome", outcome))

        st.task = asyncio.create_task(run())
        return st.request_id, await self._next(st)

    async def answer(self, request_id: str, choice: str) -> Event:
        self._gc()
        st = self._data.get(request_id)
        if st is None or st.awaiting is None or st.answer is None:
            raise LookupError(f"No pending resolution: {request_id}")

        key = st.awaiting.validate(choice)
        st.awaiting = None
        st.updated_at = time.time()
        st.answer.set_result(key)
        return await self._next(st)

    def get(self, request_id: str) -> Optional[PendingResolution]:
        self._gc()
        return self._data.get(request_id)

    async def _next(self, st: PendingResolution) -> Event:
        event = await st.events.get()
        st.updated_at = time.time()
        if event[0] != "choice":
            self._data.pop(st.request_id, None)
        return event

    def _gc(self) -> None:
        # 0 keeps every pending question until it is answered
        if self.ttl_seconds <= 0:
            return
        now = time.time()
        expired = [k for k, v in self._data.items() if now - v.updated_at > self.ttl_seconds]
        for k in expired:
            st = self._data.pop(k, None)
            if st and st.task and not st.task.done():
                log.info("Cancelling expired resolution %s", k)
                st.task.cancel()
