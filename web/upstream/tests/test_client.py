from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.test import TestCase, override_settings

from upstream import client
from upstream.departments import current_department_slug, department_slug_from_code
from upstream.exceptions import UpstreamError


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.text = ""
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = payload
    return response


class PublicUrlTests(TestCase):
    def test_prefixes_relative_path_with_api_base(self):
        self.assertEqual(
            client.public_url("/api/v1/public/notice-mod/notices"),
            "https://cms.example.edu/api/v1/public/notice-mod/notices",
        )

    def test_adds_missing_leading_slash(self):
        self.assertEqual(client.public_url("clubs"), "https://cms.example.edu/clubs")

    def test_absolute_url_passes_through(self):
        url = "https://schedule.example.edu/api/subject/list/"
        self.assertEqual(client.public_url(url), url)

    def test_build_query_drops_none_and_lowercases_booleans(self):
        query = client.build_query({"department": "abc", "limit": 20, "is_assigned": True, "x": None})
        self.assertEqual(query, "?department=abc&limit=20&is_assigned=true")
        self.assertEqual(client.build_query({}), "")


class ErrorMessageTests(TestCase):
    def test_prefers_detail_then_error(self):
        self.assertEqual(client.error_message({"detail": "Bad code", "error": "x"}, "fallback"), "Bad code")
        self.assertEqual(client.error_message({"error": "Expired"}, "fallback"), "Expired")

    def test_falls_back_when_body_has_no_message(self):
        self.assertEqual(client.error_message({}, "Unable to send verification code"),
                         "Unable to send verification code")
        self.assertEqual(client.error_message(["oops"], "fallback"), "fallback")

    def test_joins_list_details(self):
        self.assertEqual(client.error_message({"detail": ["a", "b"]}, "f"), "a b")


class ApiGetTests(TestCase):
    def setUp(self):
        cache.clear()

    @patch("requests.get")
    def test_caches_successful_responses(self, mock_get):
        mock_get.return_value = fake_response(200, {"results": [{"id": 1}]})

        first = client.api_get("/api/v1/public/website-mod/clubs", {"limit": 200})
        second = client.api_get("/api/v1/public/website-mod/clubs", {"limit": 200})

        self.assertEqual(first, {"results": [{"id": 1}]})
        self.assertEqual(second, first)
        self.assertEqual(mock_get.call_count, 1)
        called_url = mock_get.call_args[0][0]
        self.assertEqual(called_url, "https://cms.example.edu/api/v1/public/website-mod/clubs?limit=200")
        self.assertEqual(mock_get.call_args[1]["timeout"], 10)

    @patch("requests.get")
    def test_non_2xx_raises_upstream_error(self, mock_get):
        mock_get.return_value = fake_response(404, {"detail": "Not found."})

        with self.assertRaises(UpstreamError) as ctx:
            client.api_get("/missing")

        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.data, {"detail": "Not found."})

    @patch("requests.get")
    def test_network_failure_raises_upstream_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(UpstreamError) as ctx:
            client.api_get("/anything")

        self.assertIsNone(ctx.exception.status_code)

    @patch("requests.get")
    def test_invalid_json_raises_upstream_error(self, mock_get):
        mock_get.return_value = fake_response(200, None)

        with self.assertRaises(UpstreamError):
            client.api_get("/html-page")

    @patch("requests.post")
    def test_post_json_returns_raw_response(self, mock_post):
        mock_post.return_value = fake_response(201, {"id": "x"})

        response = client.post_json("/api/submit/", {"a": 1})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(mock_post.call_args[1]["json"], {"a": 1})


class DepartmentSlugTests(TestCase):
    def test_known_codes_map_to_slugs(self):
        self.assertEqual(
            department_slug_from_code("DOECE"),
            "department-of-electronics-and-computer-engineering",
        )
        self.assertEqual(department_slug_from_code("doarch"), "department-of-architecture")

    def test_full_slug_is_returned_as_is(self):
        self.assertEqual(
            department_slug_from_code("department-of-civil-engineering"),
            "department-of-civil-engineering",
        )

    def test_unknown_code_returns_none(self):
        self.assertIsNone(department_slug_from_code("dox"))
        self.assertIsNone(department_slug_from_code(""))

    @override_settings(DEPARTMENT_CODE="doie")
    def test_current_department_follows_settings(self):
        self.assertEqual(current_department_slug(), "department-of-industrial-engineering")
