import json
import os
import sys
import unittest
import urllib.error
from unittest.mock import MagicMock, patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from backend.errors import MissingCredentialsError, WolframAlphaError
from backend.sections import sections_from_pods
from backend.wolfram_client import WolframAlphaClient

SAMPLE = {
    "queryresult": {
        "success": True,
        "error": False,
        "numpods": 2,
        "pods": [
            {
                "title": "Differential equation solution",
                "subpods": [{"plaintext": "y(x) = c_1 e^x", "img": {"src": "http://img/a.gif", "alt": "y(x) = c_1 e^x", "width": 92, "height": 18}}],
            },
            {
                "title": "Slope field",
                "subpods": [{"plaintext": "", "img": {"src": "http://img/b.gif", "alt": "", "width": "300", "height": "200"}}],
            },
        ],
    }
}


def fake_response(body):
    resp = MagicMock()
    resp.read.return_value = body
    cm = MagicMock()
    cm.__enter__.return_value = resp
    return cm


class TestSectionsFromPods(unittest.TestCase):
    def test_converts_pods(self):
        sections = sections_from_pods(SAMPLE["queryresult"]["pods"])
        self.assertEqual([s.title for s in sections], ["Differential equation solution", "Slope field"])
        self.assertEqual(sections[0].text, "y(x) = c_1 e^x")
        self.assertIsNone(sections[1].text)
        self.assertEqual(sections[1].image.width, 300)

    def test_tolerates_garbage(self):
        self.assertEqual(sections_from_pods(None), [])
        sections = sections_from_pods([{"title": "Plot"}, "junk"])
        self.assertEqual(len(sections), 1)
        self.assertIsNone(sections[0].first_item)
        self.assertIsNone(sections[0].image)


class TestWolframAlphaClient(unittest.TestCase):
    def setUp(self):
        self.client = WolframAlphaClient(app_id="TEST-APP")

    def test_missing_app_id(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(MissingCredentialsError):
                WolframAlphaClient()

    def test_app_id_from_legacy_variable(self):
        with patch.dict(os.environ, {"WOLFRAM_ALPHA_API_KEY": "LEGACY"}, clear=True):
            self.assertEqual(WolframAlphaClient().app_id, "LEGACY")

    def test_query_url(self):
        url = self.client.query_url("solve y' = y")
        self.assertIn("input=solve%20y%27%20%3D%20y", url)
        self.assertIn("output=json", url)
        self.assertIn("appid=TEST-APP", url)

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_query_success(self, urlopen):
        urlopen.return_value = fake_response(json.dumps(SAMPLE).encode("utf-8"))
        result = self.client.query("solve y' = y")
        self.assertTrue(result.success)
        self.assertEqual(result.titles, ["Differential equation solution", "Slope field"])

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_query_unsuccessful(self, urlopen):
        urlopen.return_value = fake_response(b'{"queryresult": {"success": false, "error": false}}')
        result = self.client.query("gibberish")
        self.assertFalse(result.success)
        self.assertEqual(result.sections, [])

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_query_http_error(self, urlopen):
        urlopen.side_effect = urllib.error.HTTPError("http://x", 501, "Not Implemented", None, None)
        self.assertFalse(self.client.query("solve y' = y").success)

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_query_transport_error(self, urlopen):
        urlopen.side_effect = urllib.error.URLError("connection refused")
        self.assertFalse(self.client.query("solve y' = y").success)

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_query_invalid_json(self, urlopen):
        urlopen.return_value = fake_response(b"<html>oops</html>")
        self.assertFalse(self.client.query("solve y' = y").success)

    def test_blank_query_is_not_sent(self):
        with patch("backend.wolfram_client.urllib.request.urlopen") as urlopen:
            self.assertFalse(self.client.query("  ").success)
            urlopen.assert_not_called()

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_fetch_bytes(self, urlopen):
        urlopen.return_value = fake_response(b"GIF89a")
        self.assertEqual(self.client.fetch_bytes("http://img/a.gif"), b"GIF89a")

    @patch("backend.wolfram_client.urllib.request.urlopen")
    def test_fetch_bytes_error(self, urlopen):
        urlopen.side_effect = urllib.error.HTTPError("http://img/a.gif", 404, "Not Found", None, None)
        with self.assertRaises(WolframAlphaError):
            self.client.fetch_bytes("http://img/a.gif")


if __name__ == "__main__":
    unittest.main()
