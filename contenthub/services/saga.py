"""
Compensation stack for multi-step mutations that span object storage and
the database, where no shared transaction exists.
"""

import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Compensation = Callable[[], Awaitable[None]]


class Saga:
    """
    Ordered list of undo actions.

    Each step that succeeds registers its undo with ``push``. ``rollback``
    runs the registered undos newest first; an undo that raises is logged
    and the remaining undos still run.

    Usage::

        saga = Saga("class create")
        try:
            row = await insert_row()
            saga.push("delete row", lambda: delete_row(row.id))
            ...
        except Exception:
            await saga.rollback()
            raise
    """

    def __init__(self, name: str):
        self.name = name
        self._steps: list[tuple[str, Compensation]] = []

    def push(self, label: str, undo: Compensation) -> None:
        self._steps.append((label, undo))
        logger.debug(f"[{self.name}] step '{label}' completed")

    def __len__(self) -> int:
        return len(self._steps)

    async def rollback(self) -> list[str]:
        """
        Run every registered undo in reverse order.

        Returns:
            Labels of the undos that failed
        """
        failed: list[str] = []
        if self._steps:
            logger.warning(f"[{self.name}] rolling back {len(self._steps)} step(s)")

        while self._steps:
            label, undo = self._steps.pop()
            try:
                await undo()
                logger.info(f"[{self.name}] compensated '{label}'")
            except Exception as e:
                logger.error(f"[{self.name}] compensation '{label}' failed: {e}", exc_info=True)
                failed.append(label)

        return failed
