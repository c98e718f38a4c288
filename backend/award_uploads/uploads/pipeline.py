"""Ordered step runner for the upload and cleanup pipelines.

Each step is tagged either fatal (its exception aborts the run and
propagates) or best-effort (its exception is logged and the run continues).
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Step:
    """A named pipeline step.

    Attributes:
        name: Used in log lines.
        run: Coroutine function taking no arguments.
        fatal: Whether a failure aborts the pipeline.
    """
    name: str
    run: Callable[[], Awaitable[Any]]
    fatal: bool = True


async def run_steps(steps: List[Step], label: str = "pipeline") -> Optional[Any]:
    """Run ``steps`` in order and return the last step's result.

    A best-effort step that fails contributes ``None`` as its result.
    """
    result: Optional[Any] = None
    for step in steps:
        try:
            result = await step.run()
        except Exception as exc:
            if step.fatal:
                logger.debug("[%s] Step %s failed: %s", label, step.name, exc)
                raise
            logger.warning("[%s] Step %s failed, continuing: %s", label, step.name, exc)
            result = None
    return result
