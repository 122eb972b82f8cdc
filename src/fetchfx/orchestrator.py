"""RequestOrchestrator: issues, sequences and settles fetch operations.

Every issued operation gets the next sequence number of its orchestrator.
Operations settle in whatever order their transports finish; a settling
operation only publishes when its sequence number is not below the
watermark, the highest sequence number already settled. Anything older is
discarded silently: it still leaves the pending list, but its data and its
error never reach the state.

Nothing is cancelled. Disposal only clears the channel's liveness flag, so
outstanding operations run to completion and their results go to the always
observers alone.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Generator, Mapping

from fetchfx.action import transaction
from fetchfx.cache import ResponseCache, make_signature
from fetchfx.channel import Observer, StateChannel
from fetchfx.config import FetchConfig
from fetchfx.decode import resolve_decoder
from fetchfx.errors import DecodeError, TransportError
from fetchfx.observable import ObservableList
from fetchfx.reducer import NO_CHANGE, DataReducer
from fetchfx.state import FetchState, RequestInfo, ResponseInfo
from fetchfx.stream import Disposer
from fetchfx.transport import HttpxTransport

logger = logging.getLogger("fetchfx.orchestrator")


@dataclass(frozen=True, eq=False)
class Operation:
    """One issued fetch.

    ``future`` is the transport future, shared with every other operation
    that reused it through the cache. ``task`` settles this operation
    against its own orchestrator; awaiting the operation awaits the task.
    """

    sequence: int
    signature: str
    request: RequestInfo
    future: asyncio.Future
    task: asyncio.Task
    from_cache: bool = False

    def done(self) -> bool:
        return self.task.done()

    def __await__(self) -> Generator[Any, None, None]:
        return self.task.__await__()


@dataclass(frozen=True)
class _Outcome:
    payload: Any = None
    error: Any = None
    # None keeps the previous response metadata (transport failures).
    response: ResponseInfo | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def _resolve_cache(setting: Any) -> ResponseCache | None:
    if isinstance(setting, ResponseCache):
        return setting
    return ResponseCache() if setting else None


class RequestOrchestrator:
    """Request lifecycle engine behind a data-fetching view binding."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        render: Observer | None = None,
        on_change: Observer | None = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._cache = _resolve_cache(self._config.cache)
        self._channel = StateChannel()
        self._pending: ObservableList[Operation] = ObservableList()
        self._sequence = itertools.count(1)
        self._watermark = 0
        self._latest: Operation | None = None
        self._activated = False
        self._default_transport: HttpxTransport | None = None
        if render is not None:
            self._channel.observe(render)
        if on_change is not None:
            self._channel.subscribe(on_change)

    # --- inspection ---

    @property
    def config(self) -> FetchConfig:
        return self._config

    @property
    def state(self) -> FetchState:
        return self._channel.state

    @property
    def channel(self) -> StateChannel:
        return self._channel

    @property
    def cache(self) -> ResponseCache | None:
        return self._cache

    @property
    def alive(self) -> bool:
        return self._channel.alive

    @property
    def pending(self) -> ObservableList[Operation]:
        """Outstanding operations, in issue order."""
        return self._pending

    @property
    def latest(self) -> Operation | None:
        """The most recently issued operation, settled or not."""
        return self._latest

    def observe(self, render: Observer) -> Disposer:
        return self._channel.observe(render)

    def subscribe(self, on_change: Observer) -> Disposer:
        return self._channel.subscribe(on_change)

    # --- lifecycle ---

    def activate(self) -> Operation | None:
        """Apply the first configuration: publish the initial state, maybe issue."""
        if self._activated:
            return None
        self._activated = True
        self._channel.publish()
        if self._config.manual:
            return None
        return self.issue(self._config.url)

    def reconfigure(self, config: FetchConfig) -> Operation | None:
        """Swap the configuration; issue when the request changed and not manual."""
        previous, self._config = self._config, config
        if config.cache is not previous.cache:
            self._cache = _resolve_cache(config.cache)
        if not self._activated or config.manual:
            return None
        if config.request_key() == previous.request_key():
            return None
        return self.issue(config.url)

    def dispose(self) -> None:
        """Stop publishing to render observers. Outstanding work keeps running."""
        logger.debug("Disposing with %d outstanding operation(s)", len(self._pending.snapshot()))
        self._channel.dispose()

    async def wait(self) -> None:
        """Wait until no operation is outstanding, including ones issued meanwhile."""
        while True:
            tasks = [op.task for op in self._pending.snapshot()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aclose(self) -> None:
        """Wait for outstanding operations and close the default transport."""
        await self.wait()
        if self._default_transport is not None:
            await self._default_transport.aclose()
            self._default_transport = None

    # --- operations ---

    def trigger(
        self,
        url: str | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        ignore_previous_data: bool = False,
    ) -> Operation | None:
        """Explicit fetch. A ``None`` url keeps the configured one."""
        return self.issue(url or self._config.url, options, ignore_previous_data=ignore_previous_data)

    def issue(
        self,
        url: str | None,
        options: Mapping[str, Any] | None = None,
        *,
        ignore_previous_data: bool = False,
    ) -> Operation | None:
        """Start an operation for url and publish ``loading=True`` right away.

        Does nothing for an empty url, or once the orchestrator is disposed.
        Must be called with a running event loop.
        """
        if not url or not self.alive:
            return None
        config = self._config
        loop = asyncio.get_running_loop()
        request_options = config.request_options(options)
        method = (request_options or {}).get("method") or "GET"
        body = (request_options or {}).get("body")
        request = RequestInfo(url=url, method=method, options=request_options)
        sequence = next(self._sequence)
        signature = make_signature(url, method, body)

        future, from_cache = self._acquire(loop, config, signature, request)
        task = loop.create_task(self._settle(sequence, request, future, config, ignore_previous_data))
        operation = Operation(sequence, signature, request, future, task, from_cache)
        self._latest = operation
        logger.debug("Issued #%d %s %s%s", sequence, method, url, " (cached)" if from_cache else "")

        with transaction():
            self._pending.append(operation)
            self._channel.publish(loading=True, request=request)
        return operation

    def clear_data(self) -> FetchState:
        """Drop the held data and publish. Pending operations are untouched."""
        return self._channel.publish(data=None)

    # --- internals ---

    def _acquire(
        self,
        loop: asyncio.AbstractEventLoop,
        config: FetchConfig,
        signature: str,
        request: RequestInfo,
    ) -> tuple[asyncio.Future, bool]:
        if self._cache is not None:
            existing = self._cache.get(signature)
            if existing is not None:
                logger.debug("Reusing cached operation for %s", signature)
                return existing, True
        future = loop.create_task(self._send(config, request))
        if self._cache is None:
            return future, False
        winner = self._cache.put(signature, future)
        if winner is not future:
            future.cancel()
            return winner, True
        return future, False

    async def _send(self, config: FetchConfig, request: RequestInfo) -> Any:
        transport = config.transport
        if transport is None:
            if self._default_transport is None:
                self._default_transport = HttpxTransport()
            transport = self._default_transport
        result = transport(request.url, request.options)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _resolve(self, request: RequestInfo, future: asyncio.Future, config: FetchConfig) -> _Outcome:
        try:
            # shielded: a cached future may be shared with other orchestrators
            response = await asyncio.shield(future)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = TransportError(request, exc)
            error.__cause__ = exc
            return _Outcome(error=error)

        info = None
        try:
            info = ResponseInfo.from_response(response)
            payload = await resolve_decoder(config.decoder).decode(response, config.json_hook)
        except Exception as exc:
            error = DecodeError(info, exc)
            error.__cause__ = exc
            return _Outcome(error=error, response=info)

        if config.error_on_status and not info.ok and payload is not None:
            return _Outcome(error=payload, response=info)
        return _Outcome(payload=payload, response=info)

    async def _settle(
        self,
        sequence: int,
        request: RequestInfo,
        future: asyncio.Future,
        config: FetchConfig,
        ignore_previous_data: bool,
    ) -> None:
        try:
            outcome = await self._resolve(request, future, config)
        except asyncio.CancelledError:
            self._forget(sequence)
            raise
        except Exception as exc:
            outcome = _Outcome(error=exc)

        with transaction():
            try:
                if sequence >= self._watermark:
                    self._watermark = sequence
                    self._apply(outcome, config, ignore_previous_data)
            finally:
                self._forget(sequence)

    def _apply(self, outcome: _Outcome, config: FetchConfig, ignore_previous_data: bool) -> None:
        reducer = DataReducer(config.on_data_change)
        changes: dict[str, Any] = {"loading": False}
        if outcome.response is not None:
            changes["response"] = outcome.response

        if outcome.failed:
            changes["error"] = outcome.error
            if not reducer.accumulating:
                changes["data"] = None
        elif outcome.payload is None:
            changes["error"] = None
            if ignore_previous_data or not reducer.accumulating:
                changes["data"] = None
        else:
            try:
                data = reducer.reduce(
                    outcome.payload,
                    self._channel.current.data,
                    ignore_previous=ignore_previous_data,
                )
            except Exception as exc:
                # a failing on_data_change keeps the held data
                changes["error"] = exc
            else:
                changes["error"] = None
                if data is not NO_CHANGE:
                    changes["data"] = data

        self._channel.publish(**changes)

    def _forget(self, sequence: int) -> None:
        for op in self._pending.snapshot():
            if op.sequence == sequence:
                self._pending.discard(op)
                return

    def __repr__(self) -> str:
        state = "alive" if self.alive else "disposed"
        return f"RequestOrchestrator({self._config.url!r}, {state}, pending={len(self._pending.snapshot())})"
