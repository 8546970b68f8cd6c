import unittest

from gceops.errors.exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    GceOpsError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    OperationError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    is_transient,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = GceOpsError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_details_default_to_empty_dict(self) -> None:
        self.assertEqual(OperationError("boom").details, {})

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=404, message="not found"))
        self.assertIsInstance(err, NotFoundError)
        self.assertEqual(str(err), "not found")
        self.assertEqual(err.details["status_code"], 404)

        err = map_http_error(HttpErrorInfo(status_code=400, message="bad req"))
        self.assertIsInstance(err, InvalidArgumentError)

        err = map_http_error(HttpErrorInfo(status_code=429, message="rate"))
        self.assertIsInstance(err, RateLimitError)

        err = map_http_error(HttpErrorInfo(status_code=412, message="fingerprint"))
        self.assertIsInstance(err, ConflictError)

        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, AuthError)

    def test_map_http_error_403_quota_vs_permission(self) -> None:
        err = map_http_error(
            HttpErrorInfo(status_code=403, reason="quotaExceeded", message="quota")
        )
        self.assertIsInstance(err, QuotaExceededError)

        err = map_http_error(HttpErrorInfo(status_code=403, reason="forbidden"))
        self.assertIsInstance(err, PermissionError)
        self.assertEqual(str(err), "HTTP error 403")

    def test_map_http_error_5xx_and_other_are_api_error(self) -> None:
        self.assertIsInstance(map_http_error(HttpErrorInfo(status_code=503)), ApiError)
        self.assertIsInstance(map_http_error(HttpErrorInfo(status_code=418)), ApiError)


class TestIsTransient(unittest.TestCase):
    def test_transient_errors(self) -> None:
        self.assertTrue(is_transient(NetworkError("net")))
        self.assertTrue(is_transient(map_http_error(HttpErrorInfo(status_code=429))))
        self.assertTrue(is_transient(map_http_error(HttpErrorInfo(status_code=500))))
        self.assertTrue(is_transient(map_http_error(HttpErrorInfo(status_code=503))))

    def test_fatal_errors(self) -> None:
        for code in (400, 401, 403, 404, 409, 418):
            with self.subTest(code=code):
                self.assertFalse(is_transient(map_http_error(HttpErrorInfo(status_code=code))))

    def test_api_error_without_status_is_fatal(self) -> None:
        self.assertFalse(is_transient(ApiError("unknown")))
        self.assertFalse(is_transient(ValueError("not ours")))


if __name__ == "__main__":
    unittest.main()
