"""Progress / result / error event protocol shared by all tools.

A tool run is an async iterator of events: zero or more ProgressEvent
followed by exactly one terminal DoneEvent or ErrorEvent. `guarded()`
enforces that contract around a tool body and turns exceptions into a
single ErrorEvent.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator, Dict, List, Optional, Tuple, Union

from core.cancellation import CancellationToken
from core.errors import OperationCancelledError, ToolExecutionError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    progress: Tuple[str, ...]

    status = "in-progress"
    terminal = False

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "progress": list(self.progress)}


@dataclass(frozen=True)
class DoneEvent:
    result: Any

    status = "done"
    terminal = True

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "result": self.result}


@dataclass(frozen=True)
class ErrorEvent:
    message: str

    status = "error"
    terminal = True

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "error": {"message": self.message}}


ToolEvent = Union[ProgressEvent, DoneEvent, ErrorEvent]


def progress(*lines: str) -> ProgressEvent:
    return ProgressEvent(progress=tuple(lines))


async def guarded(
    events: AsyncGenerator[ToolEvent, None],
    *,
    error_prefix: str,
    token: CancellationToken,
) -> AsyncGenerator[ToolEvent, None]:
    """Wrap a tool body so it always ends with exactly one terminal event.

    Nothing is yielded once the token is cancelled, and nothing is yielded
    after the first terminal event.
    """
    try:
        async for event in events:
            if token.cancelled:
                return
            yield event
            if event.terminal:
                return
    except OperationCancelledError:
        return
    except ValidationError as e:
        # Input problems are already phrased for the caller
        yield ErrorEvent(message=str(e))
        return
    except Exception as e:
        if token.cancelled:
            return
        logger.debug("%s", error_prefix, exc_info=True)
        yield ErrorEvent(message=f"{error_prefix}: {e}")
        return
    finally:
        await events.aclose()

    if not token.cancelled:
        yield ErrorEvent(message=f"{error_prefix}: tool finished without a result")


async def collect(events: AsyncIterator[ToolEvent]) -> Tuple[List[str], Optional[ToolEvent]]:
    """Drain a run; return all progress lines and the terminal event."""
    lines: List[str] = []
    terminal: Optional[ToolEvent] = None
    async for event in events:
        if isinstance(event, ProgressEvent):
            lines.extend(event.progress)
        else:
            terminal = event
    return lines, terminal


async def drive(
    events: AsyncGenerator[ToolEvent, None],
    *,
    token: CancellationToken,
    tool_name: str,
) -> Any:
    """Consume a run for a caller that wants a plain return value.

    Progress lines are logged, a DoneEvent's result is returned and an
    ErrorEvent is raised as ToolExecutionError. If the calling task is
    cancelled the token is cancelled too, which aborts the in-flight request.
    """
    try:
        async for event in events:
            if isinstance(event, ProgressEvent):
                for line in event.progress:
                    logger.info("[%s] %s", tool_name, line)
            elif isinstance(event, DoneEvent):
                return event.result
            else:
                raise ToolExecutionError(event.message)
    except asyncio.CancelledError:
        token.cancel()
        raise
    finally:
        await events.aclose()

    raise ToolExecutionError(f"{tool_name} ended without a result")
