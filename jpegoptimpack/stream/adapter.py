"""Duplex stream adapter piping bytes through a jpegoptim child process."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, Callable, Coroutine, Iterable

from jpegoptimpack.binary import DEFAULT_RESOLVER, ExecutableResolver
from jpegoptimpack.core.errors import EmptyOutputError, NonZeroExitError, PipeError
from jpegoptimpack.core.types import ADAPTER_EVENTS, AdapterEvent, LifecycleState, build_arguments
from jpegoptimpack.process import AsyncioProcessLauncher, ProcessHandle, ProcessLauncher

logger = logging.getLogger(__name__)

DEFAULT_READ_SIZE = 64 * 1024

Listener = Callable[..., Any]


@dataclass(slots=True, eq=False)
class _Registration:
    callback: Listener
    once: bool = False


class JpegOptimStream:
    """Writable on one side, readable on the other, backed by one jpegoptim process.

    Bytes passed to ``write``/``end`` are fed to the process stdin in order;
    chunks are queued while the executable path is still being resolved.
    Process stdout is relayed as ``data`` events. Every success and failure
    path collapses into exactly one terminal event, ``end`` or ``error``.

    All methods must be called from the thread running the event loop, and
    the first ``write``/``end`` needs a running loop.
    """

    def __init__(
        self,
        args: Iterable[str] | None = None,
        *,
        resolver: ExecutableResolver | None = None,
        launcher: ProcessLauncher | None = None,
        read_size: int = DEFAULT_READ_SIZE,
    ) -> None:
        self.arguments = build_arguments(args)
        self._resolver = resolver or DEFAULT_RESOLVER
        self._launcher = launcher or AsyncioProcessLauncher()
        self._read_size = read_size
        self._state = LifecycleState.IDLE
        self._pending: list[bytes | None] | None = None
        self._process: ProcessHandle | None = None
        self._input_queue: asyncio.Queue[bytes | None] | None = None
        self._flowing: asyncio.Event | None = None
        self._output_paused = False
        self._saw_output = False
        self._error: BaseException | None = None
        self._closed = asyncio.Event()
        self._listeners: dict[str, list[_Registration]] = {name: [] for name in ADAPTER_EVENTS}
        self._tasks: set[asyncio.Task[None]] = set()
        self._feed_task: asyncio.Task[None] | None = None
        self._relay_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def saw_output(self) -> bool:
        return self._saw_output

    @property
    def paused(self) -> bool:
        return self._output_paused

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def error(self) -> BaseException | None:
        return self._error

    # Listener registration

    def on(self, event: AdapterEvent, callback: Listener) -> "JpegOptimStream":
        self._registrations(event).append(_Registration(callback))
        return self

    def once(self, event: AdapterEvent, callback: Listener) -> "JpegOptimStream":
        self._registrations(event).append(_Registration(callback, once=True))
        return self

    def off(self, event: AdapterEvent, callback: Listener) -> "JpegOptimStream":
        # Bound methods are rebuilt on each attribute access, so match by equality.
        registrations = self._registrations(event)
        for registration in registrations:
            if registration.callback == callback:
                registrations.remove(registration)
                break
        return self

    def _registrations(self, event: str) -> list[_Registration]:
        if event not in self._listeners:
            raise ValueError(f"Unknown adapter event '{event}'. Expected one of {ADAPTER_EVENTS}.")
        return self._listeners[event]

    def _emit(self, event: str, *args: Any) -> None:
        registrations = self._listeners[event]
        for registration in list(registrations):
            if registration.once:
                registrations.remove(registration)
            registration.callback(*args)

    # Writable side

    def write(self, chunk: bytes) -> None:
        if self._state is LifecycleState.TERMINATED:
            return
        if self._state is LifecycleState.IDLE:
            self._start()
        data = bytes(chunk)
        if self._pending is not None:
            self._pending.append(data)
        elif self._input_queue is not None:
            self._input_queue.put_nowait(data)

    def end(self, chunk: bytes | None = None) -> None:
        if self._state is LifecycleState.TERMINATED:
            return
        if chunk:
            self.write(chunk)
        elif self._state is LifecycleState.IDLE:
            # Nothing written yet; an empty chunk still starts a process.
            self.write(b"")
        if self._pending is not None:
            self._pending.append(None)
        elif self._input_queue is not None:
            self._input_queue.put_nowait(None)

    # Readable side

    def pause(self) -> None:
        self._output_paused = True
        if self._flowing is not None:
            self._flowing.clear()

    def resume(self) -> None:
        self._output_paused = False
        if self._flowing is not None:
            self._flowing.set()

    async def wait_closed(self) -> None:
        """Wait for the adapter to terminate; raise the error it failed with."""
        await self._closed.wait()
        if self._error is not None:
            raise self._error

    def destroy(self) -> None:
        """Abort quietly: kill the process and drop buffers without emitting events."""
        if self._state is LifecycleState.TERMINATED:
            return
        logger.debug("adapter destroyed in state %s", self._state.value)
        self._state = LifecycleState.TERMINATED
        self._release()

    # Lifecycle

    def _start(self) -> None:
        self._state = LifecycleState.RESOLVING
        self._pending = []
        self._spawn_task(self._resolve_and_spawn())

    async def _resolve_and_spawn(self) -> None:
        try:
            path = await self._resolver.resolve()
            if self._state is LifecycleState.TERMINATED:
                return
            process = await self._launcher.launch(path, self.arguments)
        except Exception:
            # Destroyed while resolving: the failure has nobody left to reach.
            if self._state is LifecycleState.TERMINATED:
                return
            raise
        if self._state is LifecycleState.TERMINATED:
            _kill(process)
            await process.wait()
            return
        self._attach(process)

    def _attach(self, process: ProcessHandle) -> None:
        self._process = process
        self._flowing = asyncio.Event()
        if not self._output_paused:
            self._flowing.set()
        self._input_queue = asyncio.Queue()
        for chunk in self._pending or ():
            self._input_queue.put_nowait(chunk)
        self._pending = None
        self._state = LifecycleState.RUNNING
        self._feed_task = self._spawn_task(self._feed_input(process, self._input_queue))
        self._relay_task = self._spawn_task(self._relay_output(process, self._flowing))
        self._spawn_task(self._watch_exit(process))

    async def _feed_input(
        self,
        process: ProcessHandle,
        queue: asyncio.Queue[bytes | None],
    ) -> None:
        try:
            while True:
                chunk = await queue.get()
                if chunk is None:
                    process.stdin.close()
                    await process.stdin.wait_closed()
                    return
                process.stdin.write(chunk)
                await process.stdin.drain()
        except OSError as error:
            raise PipeError(f"Writing to jpegoptim stdin failed: {error}") from error

    async def _relay_output(self, process: ProcessHandle, flowing: asyncio.Event) -> None:
        while self._state is not LifecycleState.TERMINATED:
            await flowing.wait()
            try:
                chunk = await process.stdout.read(self._read_size)
            except OSError as error:
                raise PipeError(f"Reading jpegoptim stdout failed: {error}") from error
            if not chunk:
                return
            # A read already in flight when pause() was called is held back.
            await flowing.wait()
            if self._state is LifecycleState.TERMINATED:
                return
            self._saw_output = True
            self._emit("data", chunk)

    async def _watch_exit(self, process: ProcessHandle) -> None:
        exit_code = await process.wait()
        logger.debug("jpegoptim pid=%s exited with code %s", process.pid, exit_code)
        if self._state is LifecycleState.TERMINATED:
            return
        if exit_code != 0:
            self._process = None
            self._fail(NonZeroExitError(exit_code))
            return
        # Relay everything still buffered in the pipe before the terminal event.
        if self._relay_task is not None:
            await asyncio.wait({self._relay_task})
        self._process = None
        if self._state is LifecycleState.TERMINATED:
            return
        if not self._saw_output:
            self._fail(EmptyOutputError())
            return
        self._state = LifecycleState.TERMINATED
        self._release()
        self._emit("end")

    def _fail(self, error: BaseException) -> None:
        if self._state is LifecycleState.TERMINATED:
            return
        logger.debug("adapter failed in state %s: %r", self._state.value, error)
        self._state = LifecycleState.TERMINATED
        self._error = error
        self._release()
        self._emit("error", error)

    def _release(self) -> None:
        if self._process is not None:
            _kill(self._process)
            self._process = None
        self._pending = None
        self._input_queue = None
        for task in (self._feed_task, self._relay_task):
            if task is not None and not task.done() and task is not asyncio.current_task():
                task.cancel()
        self._closed.set()

    def _spawn_task(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            return
        if self._state is LifecycleState.TERMINATED:
            # Raised by a listener after the terminal event; nothing left to fail.
            task.get_loop().call_exception_handler(
                {
                    "message": "Unhandled exception in jpegoptim adapter listener",
                    "exception": error,
                    "task": task,
                }
            )
            return
        self._fail(error)


def _kill(process: ProcessHandle) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        return
