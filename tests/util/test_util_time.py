import unittest
from datetime import datetime, timezone

from gceops.util.time import Deadline, parse_rfc3339, parse_rfc3339_or_none


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestParseRfc3339(unittest.TestCase):
    def test_parse_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_compute_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T04:00:00.500-08:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 0, 0, 500000, tzinfo=timezone.utc))

    def test_rejects_naive_and_empty(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("2025-01-01T12:00:00")
        with self.assertRaises(ValueError):
            parse_rfc3339("")

    def test_lenient_variant(self) -> None:
        self.assertIsNone(parse_rfc3339_or_none(None))
        self.assertIsNone(parse_rfc3339_or_none("garbage"))
        self.assertIsNotNone(parse_rfc3339_or_none("2025-01-01T00:00:00Z"))


class TestDeadline(unittest.TestCase):
    def test_elapsed_and_remaining(self) -> None:
        clock = FakeClock()
        deadline = Deadline(10, clock=clock)
        clock.now += 4
        self.assertEqual(deadline.elapsed(), 4)
        self.assertEqual(deadline.remaining(), 6)
        self.assertFalse(deadline.expired())

        clock.now += 6
        self.assertTrue(deadline.expired())
        self.assertEqual(deadline.remaining(), 0)

    def test_allows(self) -> None:
        clock = FakeClock()
        deadline = Deadline(2, clock=clock)
        self.assertTrue(deadline.allows(1.5))
        self.assertFalse(deadline.allows(2.0))
        self.assertFalse(deadline.allows(5.0))

    def test_non_positive_budget_is_expired(self) -> None:
        self.assertTrue(Deadline(0, clock=FakeClock()).expired())
        self.assertTrue(Deadline(-1, clock=FakeClock()).expired())


if __name__ == "__main__":
    unittest.main()
