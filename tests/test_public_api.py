import unittest

import gceops


class TestPublicApi(unittest.TestCase):
    def test_top_level_exports_exist(self) -> None:
        self.assertTrue(hasattr(gceops, "ComputeController"))
        self.assertTrue(hasattr(gceops, "OperationTracker"))
        self.assertTrue(hasattr(gceops, "await_operation"))
        self.assertTrue(hasattr(gceops, "PollConfig"))

        self.assertTrue(hasattr(gceops, "OperationHandle"))
        self.assertTrue(hasattr(gceops, "OperationScope"))
        self.assertTrue(hasattr(gceops, "OperationStatus"))
        self.assertTrue(hasattr(gceops, "TrackerResult"))

        self.assertTrue(hasattr(gceops, "GceOpsError"))
        self.assertTrue(hasattr(gceops, "NotFoundError"))

    def test___all___is_defined(self) -> None:
        self.assertTrue(hasattr(gceops, "__all__"))
        self.assertIn("await_operation", gceops.__all__)
        self.assertIn("GceOpsError", gceops.__all__)
        for name in gceops.__all__:
            self.assertTrue(hasattr(gceops, name), name)


if __name__ == "__main__":
    unittest.main()
