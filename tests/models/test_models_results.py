import unittest

from gceops.errors import (
    DeadlineExceededError,
    OperationCancelledError,
    OperationFailedError,
)
from gceops.models import (
    OperationHandle,
    OperationKind,
    OperationScope,
    OperationState,
    TrackerResult,
)


def _handle() -> OperationHandle:
    return OperationHandle(
        id="op-1",
        target_resource="instances/vm",
        kind=OperationKind.DELETE,
        scope=OperationScope.zone("zone-a"),
        project="p",
    )


class TestTrackerResult(unittest.TestCase):
    def test_defaults(self) -> None:
        r = TrackerResult(status="succeeded", handle=_handle(), attempts=2, elapsed_sec=1.5)
        self.assertTrue(r.succeeded)
        self.assertIsNone(r.error_type)
        self.assertEqual(r.anomalies, 0)
        r.raise_for_status()

    def test_raise_for_failed(self) -> None:
        r = TrackerResult(
            status="failed",
            handle=_handle(),
            attempts=2,
            elapsed_sec=3.0,
            error_type="OperationError",
            error_message="QUOTA_EXCEEDED: quota",
            error_details={"code": "QUOTA_EXCEEDED"},
        )
        with self.assertRaises(OperationFailedError) as ctx:
            r.raise_for_status()
        self.assertEqual(str(ctx.exception), "QUOTA_EXCEEDED: quota")
        self.assertEqual(ctx.exception.details["error_details"]["code"], "QUOTA_EXCEEDED")
        self.assertEqual(ctx.exception.details["attempts"], 2)

    def test_raise_for_timed_out_and_cancelled(self) -> None:
        timed_out = TrackerResult(
            status="timed_out",
            handle=_handle(),
            attempts=1,
            elapsed_sec=2.0,
            last_state=OperationState.RUNNING,
        )
        with self.assertRaises(DeadlineExceededError) as ctx:
            timed_out.raise_for_status()
        self.assertEqual(ctx.exception.details["last_state"], "RUNNING")

        cancelled = TrackerResult(status="cancelled", handle=_handle(), attempts=0, elapsed_sec=0.0)
        with self.assertRaises(OperationCancelledError):
            cancelled.raise_for_status()


if __name__ == "__main__":
    unittest.main()
