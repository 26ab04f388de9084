"""
Bounded stack with indexed lookup from the top.

SearchableStack keeps at most ``capacity`` elements in a ring buffer:
- push() never fails; once full, the oldest element is overwritten
- pop() / top_element() / element_at() raise when empty or out of range
- element_at(0) is the most recently pushed element
"""

from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class StackError(IndexError):
    """Base class for structural stack errors."""


class EmptyStackError(StackError):
    """Raised when reading or popping an empty stack."""

    def __init__(self) -> None:
        super().__init__("Stack is empty.")


class StackIndexError(StackError):
    """Raised when an index is outside [0, count)."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Index {index} is out of range for a stack holding {count} element(s).")
        self.index = index
        self.count = count


class SearchableStack(Generic[T]):
    """
    Fixed-capacity stack backed by a circular array.

    Usage:
        stack = SearchableStack(3)
        for value in (1, 2, 3, 4):
            stack.push(value)
        stack.count          # 3
        stack.element_at(0)  # 4
        stack.element_at(2)  # 2
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: List[Optional[T]] = [None] * capacity
        self._most_recent = capacity - 1
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def count(self) -> int:
        return self._count

    @property
    def empty(self) -> bool:
        return self._count == 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[T]:
        """Iterate from the most recent element to the oldest."""
        for index in range(self._count):
            yield self.element_at(index)

    def push(self, item: T) -> None:
        self._most_recent = (self._most_recent + 1) % self._capacity
        self._items[self._most_recent] = item
        if self._count < self._capacity:
            self._count += 1

    def pop(self) -> T:
        if self.empty:
            raise EmptyStackError()
        item = self._items[self._most_recent]
        self._items[self._most_recent] = None
        self._count -= 1
        self._most_recent = (self._most_recent - 1 + self._capacity) % self._capacity
        return item

    def top_element(self) -> T:
        if self.empty:
            raise EmptyStackError()
        return self._items[self._most_recent]

    def has_element_at(self, index: int) -> bool:
        return 0 <= index < self._count

    def element_at(self, index: int) -> T:
        """Return the element ``index`` positions below the top (0 = top)."""
        if not self.has_element_at(index):
            if self.empty:
                raise EmptyStackError()
            raise StackIndexError(index, self._count)
        return self._items[(self._most_recent - index + self._capacity) % self._capacity]

    def clear(self) -> None:
        self._items = [None] * self._capacity
        self._most_recent = self._capacity - 1
        self._count = 0

    def to_list(self) -> List[T]:
        """Elements from top to bottom."""
        return list(self)
