import io
import json
import logging
import unittest
from unittest.mock import Mock

from gceops.log import LOGGER_NAME, configure_logging
from gceops.models import (
    OperationHandle,
    OperationKind,
    OperationScope,
    OperationState,
    OperationStatus,
)
from gceops.tracker import await_operation


class TestConfigureLogging(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)

    def test_plain_format(self) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, stream=stream)

        logging.getLogger("gceops.tracker").info("polling %s", "op-1")

        self.assertIn("[INFO] gceops.tracker: polling op-1", stream.getvalue())

    def test_json_format(self) -> None:
        stream = io.StringIO()
        configure_logging(logging.DEBUG, json_format=True, stream=stream)

        logging.getLogger("gceops.controller").debug("accepted")

        entry = json.loads(stream.getvalue().strip())
        self.assertEqual(entry["level"], "DEBUG")
        self.assertEqual(entry["logger"], "gceops.controller")
        self.assertEqual(entry["message"], "accepted")
        self.assertEqual(entry["module"], "test_log")
        self.assertNotIn("operation", entry)

    def test_json_format_includes_operation_context(self) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, json_format=True, stream=stream)

        logging.getLogger("gceops.tracker").info(
            "done", extra={"operation": "op-1", "scope": "zones/zone-a"}
        )

        entry = json.loads(stream.getvalue().strip())
        self.assertEqual(entry["operation"], "op-1")
        self.assertEqual(entry["scope"], "zones/zone-a")

    def test_plain_format_appends_operation_context(self) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, stream=stream)

        logging.getLogger("gceops.tracker").info("done", extra={"operation": "op-1"})

        self.assertTrue(stream.getvalue().strip().endswith("done [operation=op-1]"))

    def test_tracker_records_carry_operation_id(self) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, json_format=True, stream=stream)

        handle = OperationHandle(
            id="op-7",
            target_resource="instances/vm",
            kind=OperationKind.DELETE,
            scope=OperationScope.zone("zone-a"),
            project="p",
        )
        source = Mock()
        source.fetch_operation_status.return_value = OperationStatus(state=OperationState.DONE)
        await_operation(source, handle)

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        self.assertTrue(entries)
        self.assertEqual(entries[-1]["operation"], "op-7")
        self.assertEqual(entries[-1]["scope"], "zones/zone-a")
        self.assertEqual(entries[-1]["module"], "operation_tracker")

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging()
        logger = configure_logging()
        self.assertEqual(len(logger.handlers), 1)


if __name__ == "__main__":
    unittest.main()
