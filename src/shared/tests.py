from django.db import IntegrityError
from django.test import SimpleTestCase
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIRequestFactory
from rest_framework.request import Request

from .exceptions import InvalidIdentifier, _flatten, _integrity_to_validation, api_exception_handler
from .pagination import ListingPagination
from .utils import get_client_ip, parse_pk, query_flag

factory = APIRequestFactory()


def drf_request(path="/", **extra):
    return Request(factory.get(path, **extra))


class ParsePkTests(SimpleTestCase):
    def test_valid_ids(self):
        self.assertEqual(parse_pk("42"), 42)
        self.assertEqual(parse_pk(7), 7)

    def test_invalid_ids(self):
        for raw in ("", "abc", "-1", "0", "1.5", None, "64b7f0c2e4b0a1a2b3c4d5e6"):
            with self.assertRaises(InvalidIdentifier):
                parse_pk(raw)

    def test_label_in_message(self):
        with self.assertRaisesMessage(InvalidIdentifier, "Invalid user ID format"):
            parse_pk("x", label="user")


class RequestHelperTests(SimpleTestCase):
    def test_client_ip_prefers_forwarded_for(self):
        request = factory.get("/", HTTP_X_FORWARDED_FOR="41.1.1.1, 10.0.0.1", REMOTE_ADDR="10.0.0.2")
        self.assertEqual(get_client_ip(request), "41.1.1.1")
        self.assertEqual(get_client_ip(factory.get("/", REMOTE_ADDR="10.0.0.2")), "10.0.0.2")

    def test_query_flag(self):
        self.assertTrue(query_flag(drf_request("/?admin=true"), "admin"))
        self.assertFalse(query_flag(drf_request("/?admin=false"), "admin"))
        self.assertFalse(query_flag(drf_request("/"), "admin"))


class PaginationTests(SimpleTestCase):
    def test_limit_bounds(self):
        paginator = ListingPagination()
        self.assertEqual(paginator.get_limit(drf_request("/")), 9)
        self.assertEqual(paginator.get_limit(drf_request("/?limit=0")), 9)
        self.assertEqual(paginator.get_limit(drf_request("/?limit=500")), 100)
        self.assertEqual(paginator.get_offset(drf_request("/?startIndex=-3")), 0)
        self.assertEqual(paginator.get_offset(drf_request("/?startIndex=18")), 18)


class ErrorEnvelopeTests(SimpleTestCase):
    def test_api_exception(self):
        response = api_exception_handler(NotFound("Listing not found"), {})
        self.assertEqual(
            response.data, {"success": False, "statusCode": 404, "message": "Listing not found"}
        )

    def test_validation_error_keeps_field_detail(self):
        response = api_exception_handler(ValidationError({"name": ["This field is required."]}), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["message"], "name: This field is required.")
        self.assertEqual(response.data["errors"], {"name": ["This field is required."]})

    def test_unexpected_error_becomes_500(self):
        with self.assertLogs("src.shared.exceptions", level="ERROR"):
            response = api_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["message"], "Internal Server Error")

    def test_integrity_error_names_the_column(self):
        exc = _integrity_to_validation(IntegrityError("UNIQUE constraint failed: accounts_user.email"))
        self.assertEqual(exc.detail, {"email": ["A record with this email already exists."]})

    def test_flatten_nested(self):
        self.assertEqual(_flatten({"non_field_errors": ["Bad"], "type": ["Wrong"]}), "Bad, type: Wrong")
