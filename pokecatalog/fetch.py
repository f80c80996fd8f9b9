"""Provider client for PokéAPI.

Issues read-only GET requests for creatures and moves with a bounded
timeout and a small retry policy, and decodes responses into catalog
dataclasses. Knows nothing about storage.
"""

from __future__ import annotations

import logging
import time
from urllib.parse import quote
from typing import Any, Callable, Dict, Optional, Union

import requests

from .config import DEFAULT_BASE_URL, Settings
from .errors import TransientFetchError
from .models import CreatureDraft, MoveDetail
from .naming import normalize_name, parse_numeric_id
from .transform import build_creature_draft, build_move_detail

logger = logging.getLogger(__name__)


def _should_retry_http(status_code: Optional[int]) -> bool:
    if status_code is None:
        return True
    if status_code == 429:
        return True
    return 500 <= status_code <= 599


class ProviderClient:
    """Read-only client for the creature and move endpoints.

    Every failure (connection error, timeout, non-2xx status, undecodable
    body) surfaces as ``TransientFetchError``. Retries happen inside a
    single call, so callers counting calls see one call per fetch.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_backoff_seconds: float = 1.0,
        request_delay_seconds: float = 0.0,
        flavor_language: str = "en",
        session: Optional[Any] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.request_delay_seconds = request_delay_seconds
        self.flavor_language = flavor_language
        self.session = session if session is not None else requests.Session()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "ProviderClient":
        return cls(
            base_url=settings.pokeapi_base_url,
            timeout=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
            retry_backoff_seconds=settings.retry_backoff_seconds,
            request_delay_seconds=settings.request_delay_seconds,
            flavor_language=settings.flavor_language,
            **kwargs,
        )

    def creature_url(self, identifier: Union[str, int]) -> str:
        if isinstance(identifier, int):
            numeric_id: Optional[int] = identifier
        else:
            numeric_id = parse_numeric_id(identifier)
        if numeric_id is not None:
            return f"{self.base_url}/pokemon/{numeric_id}/"
        slug = quote(normalize_name(str(identifier)), safe="")
        return f"{self.base_url}/pokemon/{slug}/"

    def move_url(self, move_id: int) -> str:
        return f"{self.base_url}/move/{move_id}/"

    def get_json(self, url: str) -> Dict[str, Any]:
        """GET ``url`` and return the decoded JSON object."""
        attempt = 0
        while True:
            status_code: Optional[int] = None
            try:
                resp = self.session.get(url, timeout=self.timeout)
                status_code = resp.status_code
                if 200 <= status_code < 300:
                    payload = resp.json()
                    if self.request_delay_seconds > 0:
                        self._sleep(self.request_delay_seconds)
                    if not isinstance(payload, dict):
                        raise TransientFetchError(url, "response is not a JSON object", status_code)
                    return payload
                if attempt >= self.max_retries or not _should_retry_http(status_code):
                    raise TransientFetchError(url, f"HTTP {status_code}", status_code)
            except ValueError as exc:
                # requests' JSONDecodeError derives from ValueError
                raise TransientFetchError(url, f"invalid JSON: {exc}", status_code) from exc
            except requests.exceptions.RequestException as exc:
                if attempt >= self.max_retries:
                    raise TransientFetchError(url, str(exc) or type(exc).__name__) from exc

            attempt += 1
            backoff = self.retry_backoff_seconds * (2 ** (attempt - 1))
            logger.debug("retrying %s in %.2fs (attempt %d)", url, backoff, attempt)
            self._sleep(backoff)

    def fetch_creature(self, identifier: Union[str, int]) -> CreatureDraft:
        url = self.creature_url(identifier)
        draft = build_creature_draft(self.get_json(url))
        if draft is None:
            raise TransientFetchError(url, "malformed creature payload")
        return draft

    def fetch_move(self, move_id: int) -> MoveDetail:
        url = self.move_url(move_id)
        detail = build_move_detail(self.get_json(url), self.flavor_language)
        if detail is None:
            raise TransientFetchError(url, "malformed move payload")
        return detail
