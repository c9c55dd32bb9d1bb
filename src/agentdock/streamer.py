"""Reader threads that turn agent output pipes into events."""

import threading
from typing import IO, Callable, Iterator

import structlog

from .events import Publisher, emit
from .types import AGENT_OUTPUT, OutputEvent

logger = structlog.get_logger()


def iter_lines(stream: IO[bytes]) -> Iterator[str]:
    """Yield complete lines from a binary stream, newline stripped.

    A partial line left when the stream closes is dropped.
    """
    for raw in stream:
        if not raw.endswith(b"\n"):
            break
        line = raw[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        yield line.decode("utf-8", errors="replace")


def collect(stream: IO[bytes]) -> str:
    """Read a whole stream, as text."""
    try:
        return stream.read().decode("utf-8", errors="replace")
    except (OSError, ValueError) as e:
        logger.debug("collect_failed", error=str(e))
        return ""
    finally:
        stream.close()


def _read_stream(
    agent_id: str,
    stream: IO[bytes],
    stream_name: str,
    publish: Publisher,
    on_close: Callable[[], None] | None,
) -> None:
    count = 0
    try:
        for line in iter_lines(stream):
            emit(publish, AGENT_OUTPUT, OutputEvent(id=agent_id, stream=stream_name, data=line))
            count += 1
    except (OSError, ValueError) as e:
        # ValueError: pipe closed underneath us
        logger.debug(
            "reader_error",
            agent_id=agent_id,
            stream=stream_name,
            error=str(e),
        )
    finally:
        try:
            stream.close()
        except OSError:
            pass

    logger.debug("reader_finished", agent_id=agent_id, stream=stream_name, lines=count)

    if on_close is not None:
        on_close()


def start_reader(
    agent_id: str,
    stream: IO[bytes],
    stream_name: str,
    publish: Publisher,
    on_close: Callable[[], None] | None = None,
) -> threading.Thread:
    """Start a daemon thread publishing one output event per line.

    Args:
        agent_id: Agent the stream belongs to.
        stream: Binary pipe to read. The reader owns it and closes it.
        stream_name: "stdout" or "stderr".
        publish: UI bus.
        on_close: Called once the stream has ended, by EOF or read error.

    Returns:
        The started thread.
    """
    thread = threading.Thread(
        target=_read_stream,
        args=(agent_id, stream, stream_name, publish, on_close),
        name=f"agent-{agent_id}-{stream_name}",
        daemon=True,
    )
    thread.start()
    return thread
