from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase


class HealthCheckTests(APITestCase):
    def setUp(self):
        cache.clear()

    @patch("requests.head")
    def test_healthy_when_cache_and_cms_answer(self, mock_head):
        mock_head.return_value = MagicMock(status_code=200)

        response = self.client.get("/health/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "healthy")
        self.assertEqual(response.data["department"], "doece")
        self.assertEqual(response.data["checks"], {"cache": "ok", "upstream": "ok"})

    @patch("requests.head", side_effect=requests.ConnectionError("unreachable"))
    def test_unreachable_cms_is_unhealthy(self, _mock_head):
        response = self.client.get("/health/")

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["status"], "unhealthy")
        self.assertTrue(response.data["checks"]["upstream"].startswith("error:"))


class NavigationTests(TestCase):
    def setUp(self):
        cache.clear()

    @patch("requests.get")
    def test_every_page_links_the_department_sections(self, mock_get):
        mock_get.return_value = MagicMock(status_code=404, reason="Not Found", text="")
        mock_get.return_value.json.return_value = {}

        response = self.client.get("/downloads")

        self.assertEqual(response.status_code, 200)
        for href in ("/about", "/faculty", "/events", "/notices", "/alumni", "/contact"):
            self.assertContains(response, f'href="{href}"')
        self.assertContains(response, "department-of-electronics-and-computer-engineering")
