from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request

from backend.config import MISSING_KEY_MESSAGE, WOLFRAM_BASE_URL, wolfram_app_id
from backend.errors import MissingCredentialsError, WolframAlphaError
from backend.sections import QueryResult, sections_from_pods

logger = logging.getLogger(__name__)


class WolframAlphaClient:
    def __init__(
        self,
        app_id: str | None = None,
        timeout_s: float = 30.0,
        base_url: str = WOLFRAM_BASE_URL,
    ) -> None:
        self.app_id = app_id or wolfram_app_id()
        if not self.app_id:
            raise MissingCredentialsError(MISSING_KEY_MESSAGE)
        self.timeout_s = timeout_s
        self.base_url = base_url

    def query_url(self, text: str) -> str:
        params = {
            "input": text,
            "output": "json",
            "appid": self.app_id,
            "format": "image,plaintext",
        }
        return self.base_url + "?" + urllib.parse.urlencode(params, quote_via=urllib.parse.quote)

    def _get(self, url: str) -> bytes:
        req = urllib.request.Request(url, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_s) as resp:
                return resp.read()
        except urllib.error.HTTPError as e:
            raise WolframAlphaError(f"HTTP {e.code} from {urllib.parse.urlsplit(url).netloc}") from e
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise WolframAlphaError(f"Request failed: {e}") from e

    def query(self, text: str) -> QueryResult:
        """Run one Full Results query. Failures of any kind come back as an unsuccessful result."""
        q = text.strip()
        if not q:
            return QueryResult(success=False)
        try:
            raw = self._get(self.query_url(q))
        except WolframAlphaError as e:
            logger.warning("Query %r failed: %s", q, e.message)
            return QueryResult(success=False)

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Query %r returned a body that is not JSON", q)
            return QueryResult(success=False)

        qr = data.get("queryresult") if isinstance(data, dict) else None
        if not isinstance(qr, dict):
            return QueryResult(success=False)

        logger.info(
            "Query %r: success=%s error=%s numpods=%s",
            q,
            qr.get("success"),
            qr.get("error"),
            qr.get("numpods"),
        )
        if not qr.get("success"):
            return QueryResult(success=False)

        result = QueryResult(success=True, sections=sections_from_pods(qr.get("pods")))
        logger.info("Available pods: %s", result.titles)
        return result

    def fetch_bytes(self, url: str) -> bytes:
        logger.info("Fetching image from %s", url)
        return self._get(url)
