"""
Unit tests for InvoiceNumberGenerator.
"""

import datetime
import threading

from catering_invoices.services.invoice_number import InvoiceNumberGenerator


def _generator(**kwargs):
    return InvoiceNumberGenerator(today=lambda: datetime.date(2024, 3, 10), **kwargs)


class TestNextNumber:
    """Tests for the INV-YYYY-NNN sequence."""

    def test_first_numbers(self):
        generator = _generator()

        assert generator.next_number() == "INV-2024-001"
        assert generator.next_number() == "INV-2024-002"

    def test_sequence_grows_past_padding(self):
        generator = _generator(start=999)

        assert generator.next_number() == "INV-2024-999"
        assert generator.next_number() == "INV-2024-1000"

    def test_custom_prefix_and_padding(self):
        generator = _generator(prefix="CAT", padding=5)

        assert generator.next_number() == "CAT-2024-00001"

    def test_year_follows_today(self):
        today = [datetime.date(2024, 12, 31)]
        generator = InvoiceNumberGenerator(today=lambda: today[0])

        assert generator.next_number() == "INV-2024-001"
        today[0] = datetime.date(2025, 1, 1)
        # The counter does not restart with the year
        assert generator.next_number() == "INV-2025-002"

    def test_concurrent_calls_never_repeat(self):
        generator = _generator()
        results = []

        def worker():
            for _ in range(100):
                results.append(generator.next_number())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 800
        assert len(set(results)) == 800
        assert generator.peek == 801


class TestResetAndSeed:
    """Tests for reset() and seed()."""

    def test_reset(self):
        generator = _generator()
        generator.next_number()
        generator.next_number()

        generator.reset()

        assert generator.next_number() == "INV-2024-001"

    def test_seed_continues_after_highest(self):
        generator = _generator()

        generator.seed(["INV-2023-007", "INV-2024-003", "custom-42", "OTHER-2024-900"])

        assert generator.next_number() == "INV-2024-008"

    def test_seed_never_moves_backwards(self):
        generator = _generator(start=50)

        generator.seed(["INV-2024-003"])

        assert generator.peek == 50
