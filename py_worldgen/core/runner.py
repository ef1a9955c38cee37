"""
Background generation.

Runs the pipeline on a daemon thread and relays its progress as messages.
A caller that loses interest simply stops iterating; the thread finishes
on its own and its remaining messages are dropped.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Union

import structlog

from ..config import WorldSettings
from .pipeline import WorldSnapshot, generate_world

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProgressMessage:
    stage: str
    percent: int


@dataclass(frozen=True)
class ResultMessage:
    world: WorldSnapshot


@dataclass(frozen=True)
class ErrorMessage:
    message: str


GenerationMessage = Union[ProgressMessage, ResultMessage, ErrorMessage]


def run_generation(
    settings: Union[WorldSettings, Mapping[str, Any], None] = None,
) -> Iterator[GenerationMessage]:
    """
    Generate a world in the background.

    Yields progress messages in order, then exactly one ResultMessage or
    ErrorMessage.
    """
    messages: "queue.Queue[GenerationMessage]" = queue.Queue()

    def on_progress(stage: str, percent: int) -> None:
        messages.put(ProgressMessage(stage=stage, percent=percent))

    def work() -> None:
        try:
            world = generate_world(settings, on_progress=on_progress)
        except Exception as e:
            logger.error("World generation failed", error=str(e))
            messages.put(ErrorMessage(message=str(e)))
        else:
            messages.put(ResultMessage(world=world))

    thread = threading.Thread(target=work, name="world-generation", daemon=True)
    thread.start()

    while True:
        message = messages.get()
        yield message
        if not isinstance(message, ProgressMessage):
            break
