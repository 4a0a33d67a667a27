"""ItemTracker — LIFO stack of currently open report items."""

from __future__ import annotations

from rpclient.reporting.base import EmptyStackError

# A slot is either None (the launch root) or an item id assigned by the service.
Slot = str | None


class ItemTracker:
    """Stack of open items; the top slot is the implicit parent for new items.

    Not synchronized: one tracker belongs to one session and is driven from a
    single thread.
    """

    def __init__(self) -> None:
        self._slots: list[Slot] = []

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"ItemTracker(slots={self._slots!r})"

    @property
    def depth(self) -> int:
        """Number of slots currently held."""
        return len(self._slots)

    @property
    def is_empty(self) -> bool:
        return not self._slots

    def push(self, slot: Slot) -> None:
        """Open a slot on top of the stack."""
        self._slots.append(slot)

    def peek(self) -> Slot:
        """Return the top slot without removing it.

        Raises:
            EmptyStackError: If there is no active context.
        """
        if not self._slots:
            raise EmptyStackError("no active context: item tracker is empty")
        return self._slots[-1]

    def pop(self) -> Slot:
        """Remove and return the top slot.

        Raises:
            EmptyStackError: If the tracker is empty.
        """
        if not self._slots:
            raise EmptyStackError("cannot pop from an empty item tracker")
        return self._slots.pop()

    def clear(self) -> None:
        """Drop every slot."""
        self._slots.clear()
