"""
Invoice number generation
Project: Catering Invoices

Format: <PREFIX>-<YYYY>-<NNN> (e.g. INV-2024-001)
"""

import logging
import re
import threading
from datetime import date
from typing import Callable, Iterable

logger = logging.getLogger(__name__)


class InvoiceNumberGenerator:
    """
    Process-wide invoice number sequence.

    The counter starts at ``start``, only ever increases, is never reused
    after an invoice is deleted and does not restart with the calendar
    year. Only the year part of the number follows ``today()``.

    Numbers are unique within one process. With a persistent store call
    ``seed()`` at startup so the sequence continues after the numbers
    already stored; running several processes against the same store is
    not supported.

    Args:
        prefix: Text before the year
        padding: Zero-padding width of the sequence
        start: First sequence value
        today: Returns the current date (injectable for tests)
    """

    def __init__(
        self,
        prefix: str = "INV",
        padding: int = 3,
        start: int = 1,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._prefix = prefix
        self._padding = padding
        self._today = today
        self._lock = threading.Lock()
        self._next = start
        self._pattern = re.compile(rf"^{re.escape(prefix)}-(\d{{4}})-(\d+)$")

    @property
    def peek(self) -> int:
        """The sequence value the next call to next_number() will use."""
        return self._next

    def next_number(self) -> str:
        """
        Return the next invoice number and advance the sequence.

        Returns:
            str: Formatted number, e.g. ``INV-2024-001``
        """
        with self._lock:
            sequence = self._next
            self._next += 1
        year = self._today().year
        return f"{self._prefix}-{year:04d}-{sequence:0{self._padding}d}"

    def reset(self, start: int = 1) -> None:
        """Restart the sequence from ``start``."""
        with self._lock:
            self._next = start
        logger.info("Invoice number sequence reset to %d", start)

    def seed(self, existing_numbers: Iterable[str]) -> None:
        """
        Move the sequence past the highest sequence found in ``existing_numbers``.

        Numbers that do not match the generator's format are ignored.
        The sequence never moves backwards.
        """
        highest = 0
        for number in existing_numbers:
            match = self._pattern.match(number)
            if match:
                highest = max(highest, int(match.group(2)))

        with self._lock:
            if highest >= self._next:
                self._next = highest + 1
                logger.info("Invoice number sequence seeded, next value %d", self._next)
