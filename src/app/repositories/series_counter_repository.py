"""Series Counter Repository Interface (sequence authority)

Defines the contract for allocating internal sequence numbers.
"""

from abc import ABC, abstractmethod


class SeriesCounterRepository(ABC):
    """
    Sequence authority for document numbering

    next_sequence must behave as a linearizable atomic increment: for one
    series, concurrent callers never observe the same value and the
    allocator itself never skips a value.
    """

    @abstractmethod
    async def next_sequence(self, series: str) -> int:
        """
        Allocate the next sequence number of a series

        The allocation becomes durable when the surrounding unit of work
        commits; a series seen for the first time starts at 1.

        Args:
            series: Series code (e.g., 'A')

        Returns:
            Allocated sequence number
        """
        pass

    @abstractmethod
    async def current_value(self, series: str) -> int:
        """
        Last allocated number of a series (0 if none)

        Args:
            series: Series code

        Returns:
            Last allocated sequence number
        """
        pass
