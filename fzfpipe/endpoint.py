"""
fzfpipe.endpoint — The OS channel the finder wrapper writes into.

Two variants behind one interface, picked once by create_endpoint():

    FifoEndpoint        POSIX FIFO at <tmpdir>/fzf-pipe-<pid>[-N]
    NamedPipeEndpoint   Windows named pipe \\\\?\\pipe\\fzf-pipe-<pid>[-N]

Names are made unique by retrying with an incrementing suffix while the
OS reports the name as taken. Both variants give up after
MAX_NAME_ATTEMPTS and stay CLOSED with name None; the host keeps running
without finder events.

A FIFO reader sees EOF every time a writer closes, and the next writer
needs a fresh read side. FifoEndpoint therefore runs an explicit loop:

    CLOSED → OPENING → LISTENING → (writer closed) → OPENING → ...

The named pipe server keeps accepting clients by itself.

Received bytes are split into lines and pushed through one queue, so
lines reach on_line in arrival order and one at a time.
"""

import asyncio
import errno
import logging
import os
import sys
import tempfile
from abc import ABC, abstractmethod
from enum import Enum
from typing import Awaitable, Callable, List, Optional

logger = logging.getLogger("fzfpipe.endpoint")

PIPE_BASENAME = "fzf-pipe"
WINDOWS_PIPE_PREFIX = "\\\\?\\pipe\\"
MAX_NAME_ATTEMPTS = 10
FIFO_MODE = 0o600

# Windows error codes for a pipe name that already has a first instance
ERROR_ACCESS_DENIED = 5
ERROR_PIPE_BUSY = 231

LineHandler = Callable[[bytes], Awaitable[None]]


class EndpointState(Enum):
    CLOSED = "closed"
    OPENING = "opening"
    LISTENING = "listening"


class EndpointError(Exception):
    """Endpoint setup failed for a reason other than a name collision"""


def endpoint_name(base: str, pid: int, suffix: int = 0) -> str:
    """<base>-<pid>, plus -<suffix> when suffix is non-zero"""
    name = f"{base}-{pid}"
    if suffix > 0:
        name += f"-{suffix}"
    return name


class _LineProtocol(asyncio.Protocol):
    """
    Splits a byte stream into lines.

    Used for the FIFO read side and for each named pipe client. A partial
    last line is flushed when the writer goes away.
    """

    def __init__(self, on_line: Callable[[bytes], None]):
        self._on_line = on_line
        self._buffer = b''
        self._closed = asyncio.get_running_loop().create_future()

    def data_received(self, data: bytes):
        self._buffer += data
        *lines, self._buffer = self._buffer.split(b'\n')
        for line in lines:
            self._on_line(line)

    def eof_received(self):
        self._flush()
        return False

    def connection_lost(self, exc: Optional[Exception]):
        self._flush()
        if exc is not None:
            logger.debug(f"Pipe connection lost: {exc}")
        if not self._closed.done():
            self._closed.set_result(None)

    def _flush(self):
        if self._buffer:
            line, self._buffer = self._buffer, b''
            self._on_line(line)

    async def wait_closed(self):
        await self._closed


class PipeEndpoint(ABC):
    """
    Base endpoint: name, state, and in-order delivery to on_line.

    Subclasses create the OS object in start() and feed received lines to
    _enqueue().
    """

    def __init__(self, on_line: LineHandler, pid: Optional[int] = None):
        self._on_line = on_line
        self.pid = pid if pid is not None else os.getpid()
        self._name: Optional[str] = None
        self._state = EndpointState.CLOSED
        self._listening = asyncio.Event()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self.sessions = 0

    @property
    def name(self) -> Optional[str]:
        """FIFO path or pipe name; None until created or in degraded mode"""
        return self._name

    @property
    def state(self) -> EndpointState:
        return self._state

    def _set_state(self, state: EndpointState):
        if state != self._state:
            logger.debug(f"Endpoint {self._name}: {self._state.value} → {state.value}")
        self._state = state
        if state == EndpointState.LISTENING:
            self._listening.set()
        else:
            self._listening.clear()

    async def wait_listening(self):
        await self._listening.wait()

    def _enqueue(self, line: bytes):
        self._queue.put_nowait(line)

    def _start_consumer(self):
        if self._consumer is None:
            self._consumer = asyncio.create_task(
                self._consume(), name=f"fzfpipe-dispatch-{self.pid}"
            )

    async def _consume(self):
        while True:
            line = await self._queue.get()
            try:
                await self._on_line(line)
            except Exception as e:
                logger.error(f"Line handler failed: {e}", exc_info=True)

    async def _stop_consumer(self):
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None

    @abstractmethod
    async def start(self):
        """Create the OS object and begin listening"""

    @abstractmethod
    async def close(self):
        """Stop listening and release the OS object"""


class FifoEndpoint(PipeEndpoint):
    """
    POSIX FIFO endpoint.

    Args:
        on_line: Coroutine called with each received line
        pid: Process id used in the name (default: os.getpid())
        temp_dir: Directory for the FIFO (default: tempfile.gettempdir())
        max_sessions: Stop after this many writer sessions (default: never)
    """

    def __init__(self, on_line: LineHandler, pid: Optional[int] = None,
                 temp_dir: Optional[str] = None,
                 max_sessions: Optional[int] = None):
        super().__init__(on_line, pid)
        self.temp_dir = temp_dir or tempfile.gettempdir()
        self.max_sessions = max_sessions
        self._listen_task: Optional[asyncio.Task] = None
        self._transport: Optional[asyncio.ReadTransport] = None

    def _create(self) -> Optional[str]:
        base = os.path.join(self.temp_dir, PIPE_BASENAME)
        for suffix in range(MAX_NAME_ATTEMPTS):
            path = endpoint_name(base, self.pid, suffix)
            try:
                os.mkfifo(path, FIFO_MODE)
            except OSError as e:
                logger.debug(f"mkfifo {path} failed: {e}")
                continue
            return path
        return None

    async def start(self):
        self._name = self._create()
        if self._name is None:
            logger.warning(
                f"Could not create a FIFO in {self.temp_dir} after "
                f"{MAX_NAME_ATTEMPTS} attempts; finder events are disabled"
            )
            return
        logger.info(f"FIFO endpoint at {self._name}")
        self._start_consumer()
        self._listen_task = asyncio.create_task(
            self._listen_loop(), name=f"fzfpipe-fifo-{self.pid}"
        )

    async def _open_session(self) -> _LineProtocol:
        loop = asyncio.get_running_loop()
        # Non-blocking open returns at once even with no writer attached
        fd = os.open(self._name, os.O_RDONLY | os.O_NONBLOCK)
        pipe = os.fdopen(fd, 'rb', buffering=0)
        protocol = _LineProtocol(self._enqueue)
        try:
            self._transport, _ = await loop.connect_read_pipe(lambda: protocol, pipe)
        except Exception:
            pipe.close()
            raise
        return protocol

    async def _listen_loop(self):
        while self.max_sessions is None or self.sessions < self.max_sessions:
            self._set_state(EndpointState.OPENING)
            try:
                protocol = await self._open_session()
            except OSError as e:
                logger.error(f"Cannot open FIFO {self._name}: {e}")
                break
            except Exception as e:
                logger.error(f"FIFO listener for {self._name} failed: {e}", exc_info=True)
                break
            self.sessions += 1
            self._set_state(EndpointState.LISTENING)

            await protocol.wait_closed()
            logger.debug(f"Writer closed {self._name}, reopening")
            self._transport.close()
            self._transport = None
        self._set_state(EndpointState.CLOSED)

    async def close(self):
        if self._listen_task is not None:
            self._listen_task.cancel()
            try:
                await self._listen_task
            except asyncio.CancelledError:
                pass
            self._listen_task = None
        if self._transport is not None:
            self._transport.close()
            self._transport = None
        await self._stop_consumer()
        self._set_state(EndpointState.CLOSED)
        if self._name is not None:
            try:
                os.unlink(self._name)
            except FileNotFoundError:
                pass


def _is_name_in_use(exc: OSError) -> bool:
    if getattr(exc, 'winerror', None) in (ERROR_ACCESS_DENIED, ERROR_PIPE_BUSY):
        return True
    return isinstance(exc, PermissionError) or exc.errno == errno.EADDRINUSE


class NamedPipeEndpoint(PipeEndpoint):
    """
    Windows named pipe endpoint.

    Needs the proactor event loop (the default on Windows). Every client
    connection gets its own line buffer; lines from all clients share the
    dispatch queue.
    """

    def __init__(self, on_line: LineHandler, pid: Optional[int] = None):
        super().__init__(on_line, pid)
        self._servers: List = []
        self.connections = 0

    def _protocol_factory(self) -> _LineProtocol:
        self.connections += 1
        self.sessions += 1
        logger.debug(f"Client {self.connections} connected to {self._name}")
        return _LineProtocol(self._enqueue)

    async def start(self):
        loop = asyncio.get_running_loop()
        serve = getattr(loop, 'start_serving_pipe', None)
        if serve is None:
            raise EndpointError(
                f"{type(loop).__name__} cannot serve named pipes; "
                f"a proactor event loop is required"
            )

        base = WINDOWS_PIPE_PREFIX + PIPE_BASENAME
        self._set_state(EndpointState.OPENING)
        for suffix in range(MAX_NAME_ATTEMPTS):
            name = endpoint_name(base, self.pid, suffix)
            try:
                self._servers = await serve(self._protocol_factory, name)
            except OSError as e:
                if _is_name_in_use(e):
                    logger.debug(f"Pipe {name} in use, trying next suffix")
                    continue
                self._set_state(EndpointState.CLOSED)
                raise
            self._name = name
            break
        else:
            self._set_state(EndpointState.CLOSED)
            logger.warning(
                f"No free pipe name after {MAX_NAME_ATTEMPTS} attempts; "
                f"finder events are disabled"
            )
            return

        logger.info(f"Named pipe endpoint at {self._name}")
        self._start_consumer()
        self._set_state(EndpointState.LISTENING)

    async def close(self):
        for server in self._servers:
            server.close()
        self._servers = []
        await self._stop_consumer()
        self._set_state(EndpointState.CLOSED)


def create_endpoint(on_line: LineHandler, platform: Optional[str] = None,
                    pid: Optional[int] = None,
                    temp_dir: Optional[str] = None) -> PipeEndpoint:
    """Pick the endpoint variant for the platform"""
    platform = platform or sys.platform
    if platform == 'win32':
        return NamedPipeEndpoint(on_line, pid=pid)
    return FifoEndpoint(on_line, pid=pid, temp_dir=temp_dir)
