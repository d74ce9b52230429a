from __future__ import annotations
import logging

import requests

from errors import UpstreamError

LOG = logging.getLogger(__name__)


class OllamaClient:
    """Blocking, non-streaming client for an Ollama-compatible /api/generate endpoint.

    One request per call: no retries, and every failure (HTTP status, timeout,
    connection error, empty output) surfaces as a single UpstreamError.
    """

    def __init__(self, base_url: str, model: str, timeout: float = 60, http=None):
        self.url = base_url.rstrip("/") + "/api/generate"
        self.model = model
        self.timeout = timeout
        # requests module by default: no Session shared across request threads
        self.http = http or requests

    def generate(self, prompt: str) -> str:
        body = {"model": self.model, "prompt": prompt, "stream": False}
        LOG.info("calling %s model=%s prompt_len=%d", self.url, self.model, len(prompt))
        try:
            resp = self.http.post(self.url, json=body, timeout=self.timeout)
        except requests.Timeout as e:
            LOG.warning("generation service timed out after %ss", self.timeout)
            raise UpstreamError("Ollama request failed", details=f"timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            LOG.warning("generation service unreachable: %s", e)
            raise UpstreamError("Ollama request failed", details=str(e)) from e

        if not 200 <= resp.status_code < 300:
            LOG.warning("generation service returned %s", resp.status_code)
            raise UpstreamError("Ollama request failed", details=resp.text, upstream_status=resp.status_code)

        try:
            data = resp.json()
        except ValueError:
            raise UpstreamError("Empty response from Ollama.")

        text = data.get("response") if isinstance(data, dict) else None
        text = text.strip() if isinstance(text, str) else ""
        if not text:
            raise UpstreamError("Empty response from Ollama.")
        LOG.info("generation ok, %d chars", len(text))
        return text
