from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import urlsplit, urlunsplit
import requests

from ...domain.errors import EmbeddingError, GenerationError
from ...domain.interfaces import GenerationProvider
from ...domain.models import GenerationOptions
from ..timeouts import http_timeout_seconds
from ..config import ollama_url

T = TypeVar("T")


def candidate_base_urls(base: str) -> List[str]:
    """Try the IPv4 loopback before ``localhost``; other hosts are used as given."""
    parts = urlsplit(base)
    if (parts.hostname or "").lower() != "localhost":
        return [base]
    netloc = "127.0.0.1" + (f":{parts.port}" if parts.port else "")
    loopback = urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
    return [loopback, base]


class OllamaClient(GenerationProvider):
    """Embedding and generation adapter for Ollama /api/embeddings and /api/generate."""

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None) -> None:
        self._base_urls = candidate_base_urls((base_url or ollama_url()).rstrip("/"))
        self._session = session or requests.Session()

    def embed(self, text: str, model: str) -> List[float]:
        try:
            data = self._post("api/embeddings", {"model": model, "prompt": text})
            values = [float(x) for x in data["embedding"]]
        except (requests.RequestException, KeyError, TypeError, ValueError) as exc:
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc
        if not values:
            raise EmbeddingError("Embedding response was empty")
        return values

    def complete(self, prompt: str, model: str, options: Optional[GenerationOptions] = None) -> str:
        body: Dict[str, Any] = {"model": model, "prompt": prompt, "stream": False}
        if options is not None:
            if options.json_output:
                body["format"] = "json"
            sampling: Dict[str, float] = {}
            if options.temperature is not None:
                sampling["temperature"] = float(options.temperature)
            if options.max_tokens is not None:
                sampling["num_predict"] = int(options.max_tokens)
            if sampling:
                body["options"] = sampling
        try:
            data = self._post("api/generate", body)
            text = data["response"]
        except (requests.RequestException, KeyError, TypeError, ValueError) as exc:
            raise GenerationError(f"Generation request failed: {exc}") from exc
        if not isinstance(text, str):
            raise GenerationError("Generation response was not text")
        return text

    def list_models(self) -> List[str]:
        """Names of models installed on the server."""
        def work(base: str) -> List[str]:
            r = self._session.get(f"{base}/api/tags", timeout=http_timeout_seconds())
            r.raise_for_status()
            data = r.json() or {}
            return [str(m.get("name")) for m in (data.get("models") or []) if m.get("name")]
        return self._with_fallback(work)

    def is_reachable(self) -> bool:
        try:
            self.list_models()
        except (requests.RequestException, ValueError):
            return False
        return True

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        timeout = http_timeout_seconds()

        def work(base: str) -> Dict[str, Any]:
            r = self._session.post(f"{base}/{path}", json=body, timeout=timeout)
            r.raise_for_status()
            return r.json() or {}

        return self._with_fallback(work)

    def _with_fallback(self, work: Callable[[str], T]) -> T:
        last_exc: Optional[Exception] = None
        for base in self._base_urls:
            try:
                return work(base)
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_exc = exc
                continue
        if last_exc is None:
            raise RuntimeError("No Ollama base URL configured")
        raise last_exc
