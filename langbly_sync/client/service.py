"""
Langbly Translation Client Module

This module provides the client for the Langbly translation API:
- TranslationClient with translate_batch / translate_one
- Bounded retries with exponential backoff and Retry-After support
- Configuration validation

For request classification and timeouts, see client/transport.py
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx

from langbly_sync.config import CLIENT_DEFAULTS
from langbly_sync.exceptions import (
    ResponseFormatError,
    RetriesExhaustedError,
    TranslationError,
)
from langbly_sync.logger import get_logger
from langbly_sync.client.transport import (
    AttemptOutcome,
    AttemptState,
    classify_response,
    classify_transport_error,
    get_httpx_timeout,
)

logger = get_logger(__name__)

DEFAULT_API_URL = "https://api.langbly.com"
TRANSLATE_PATH = "/language/translate/v2"
PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"


@dataclass
class Translation:
    """One translated string and the (detected) source language."""
    text: str
    source: str


def validate_client_config(config: Dict[str, Any]) -> None:
    """
    Validate that the Langbly API configuration is properly set up.

    Raises:
        TranslationError: If configuration is invalid or missing, with code and details.
    """
    client_config = config.get('langbly') or {}
    api_key = client_config.get('api_key', '')
    if not api_key or api_key == PLACEHOLDER_API_KEY:
        raise TranslationError(
            "Langbly API key not configured. Set LANGBLY_API_KEY or langbly.api_key in config.json.",
            code="api_config_missing",
            details={"missing_field": "api_key"},
        )
    api_url = client_config.get('api_url', DEFAULT_API_URL)
    if not api_url or not str(api_url).startswith(("http://", "https://")):
        raise TranslationError(
            f"Invalid Langbly API URL: {api_url!r}",
            code="api_config_invalid",
            details={"field": "api_url"},
        )


class TranslationClient:
    """Client for the Langbly translate endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        max_retries: int = CLIENT_DEFAULTS["max_retries"],
        timeout: Any = CLIENT_DEFAULTS["timeout"],
        base_delay: float = CLIENT_DEFAULTS["base_delay"],
        max_delay: float = CLIENT_DEFAULTS["max_delay"],
        user_agent: str = "langbly-sync/1.0.0",
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.api_key = api_key
        self.api_url = api_url.rstrip('/')
        self.max_retries = max_retries
        self.timeout = get_httpx_timeout(timeout)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.user_agent = user_agent
        self._transport = transport
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: Dict[str, Any], **kwargs) -> "TranslationClient":
        """Build a client from the 'langbly' section of the application config."""
        validate_client_config(config)
        client_config = {**CLIENT_DEFAULTS, **config['langbly']}
        return cls(
            api_key=client_config['api_key'],
            api_url=client_config.get('api_url', DEFAULT_API_URL),
            max_retries=int(client_config['max_retries']),
            timeout=client_config['timeout'],
            base_delay=float(client_config['base_delay']),
            max_delay=float(client_config['max_delay']),
            user_agent=client_config.get('user_agent', "langbly-sync/1.0.0"),
            **kwargs,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def translate_batch(
        self,
        texts: List[str],
        target: str,
        source: Optional[str] = None,
        fmt: Optional[str] = None,
    ) -> List[Translation]:
        """
        Translate a batch of strings.

        Returns one Translation per input string, in input order.

        Raises:
            PermanentServiceError: Non-retriable API error.
            RetriesExhaustedError: Transient failures outlasted the retry budget.
            ResponseFormatError: Response does not match the request.
        """
        if not texts:
            return []

        body: Dict[str, Any] = {"q": list(texts), "target": target}
        if source:
            body["source"] = source
        if fmt:
            body["format"] = fmt

        logger.debug(f"Translating {len(texts)} strings to {target} (format: {fmt or 'text'})")
        data = self._post_with_retry(TRANSLATE_PATH, body)
        translations = self._parse_translations(data, source)

        if len(translations) != len(texts):
            raise ResponseFormatError(
                f"Langbly API returned {len(translations)} translations for {len(texts)} strings"
            )
        return translations

    def translate_one(
        self,
        text: str,
        target: str,
        source: Optional[str] = None,
        fmt: Optional[str] = None,
    ) -> Translation:
        """Translate a single string (a batch of one)."""
        return self.translate_batch([text], target, source=source, fmt=fmt)[0]

    def backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
        if retry_after is not None:
            return min(retry_after, self.max_delay)
        return min(self.base_delay * (2 ** attempt), self.max_delay)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    def _attempt(self, http: httpx.Client, url: str, body: Dict[str, Any]) -> AttemptOutcome:
        try:
            response = http.post(url, json=body, headers=self._headers())
        except httpx.TransportError as e:
            return classify_transport_error(e)
        return classify_response(response)

    def _post_with_retry(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST with bounded retries.

        Each attempt ends in SUCCEEDED, FAILED_TRANSIENT or FAILED_PERMANENT.
        Only FAILED_TRANSIENT loops back to ATTEMPTING, at most max_retries times.
        """
        url = f"{self.api_url}{path}"
        state = AttemptState.ATTEMPTING
        outcome: Optional[AttemptOutcome] = None
        attempt = 0

        with httpx.Client(timeout=self.timeout, transport=self._transport) as http:
            while state is AttemptState.ATTEMPTING:
                outcome = self._attempt(http, url, body)
                attempt += 1

                if outcome.state is AttemptState.FAILED_TRANSIENT and attempt < self.max_attempts:
                    delay = self.backoff_delay(attempt - 1, outcome.retry_after)
                    logger.warning(
                        f"  Attempt {attempt}/{self.max_attempts} failed: {outcome.error}. "
                        f"Waiting {delay:.1f}s before retry..."
                    )
                    self._sleep(delay)
                    continue

                state = outcome.state

        if state is AttemptState.SUCCEEDED:
            if attempt > 1:
                logger.info(f"  Request succeeded on attempt {attempt}/{self.max_attempts}")
            return outcome.payload

        if state is AttemptState.FAILED_PERMANENT:
            logger.error(f"  Non-recoverable error: {outcome.error}")
            raise outcome.error

        raise RetriesExhaustedError(
            f"Langbly API request failed after {attempt} attempts: {outcome.error}",
            attempts=attempt,
            status_code=outcome.error.status_code,
        )

    @staticmethod
    def _parse_translations(data: Any, source: Optional[str]) -> List[Translation]:
        try:
            items = data["data"]["translations"]
        except (KeyError, TypeError) as e:
            raise ResponseFormatError(f"Unexpected Langbly API response format: missing {e}") from e
        if not isinstance(items, list):
            raise ResponseFormatError("Unexpected Langbly API response format: translations is not a list")

        translations = []
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("translatedText"), str):
                raise ResponseFormatError(f"Unexpected translation item: {item!r}")
            translations.append(Translation(
                text=item["translatedText"],
                source=item.get("detectedSourceLanguage") or source or "",
            ))
        return translations
