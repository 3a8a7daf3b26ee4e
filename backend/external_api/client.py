"""
External Detection Client
HTTP client for third-party AI-text detection APIs with timeout, retries and
error classification.

Transport failures (timeouts, dropped connections) are retried with
exponential backoff. Completed responses are never retried here; the vendor
wrappers turn failure statuses into classified ``APIError``s for the caller.
"""
import logging
import time
from typing import Callable, Dict, List, Optional

import requests

from .config import (
    API_COST_PER_WORD, API_MAX_RETRIES, API_RETRY_DELAY_SECONDS, API_TIMEOUT_SECONDS,
    GPTZERO_URL, HUGGINGFACE_MODEL, HUGGINGFACE_URL, USER_AGENT,
)
from .errors import (
    UpstreamMisconfigured, UpstreamUnknownError, classify_api_error, error_for_status,
)

logger = logging.getLogger(__name__)

RETRYABLE_MESSAGES = ('fetch failed', 'network error', 'connection reset', 'timeout')


def is_retryable_error(error: Exception) -> bool:
    if isinstance(error, (requests.Timeout, requests.ConnectionError)):
        return True
    message = str(error).lower()
    return any(m in message for m in RETRYABLE_MESSAGES)


def estimate_cost(word_count: int, method: str) -> float:
    """Dollar cost of running ``word_count`` words through ``method``."""
    if method != 'api':
        return 0.0
    return round(word_count * API_COST_PER_WORD, 6)


class ExternalDetectionClient:
    """Wrapper around the GPTZero and Hugging Face detection endpoints."""

    def __init__(self, gptzero_api_key: Optional[str] = None,
                 huggingface_api_key: Optional[str] = None,
                 timeout: float = API_TIMEOUT_SECONDS,
                 max_retries: int = API_MAX_RETRIES,
                 retry_delay: float = API_RETRY_DELAY_SECONDS,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.gptzero_api_key = gptzero_api_key
        self.huggingface_api_key = huggingface_api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', USER_AGENT)
        self._sleep = sleep

        if not self.is_configured:
            logger.warning("No detection API keys found. Text detection runs heuristic-only.")

    @property
    def available_vendors(self) -> List[str]:
        vendors = []
        if self.gptzero_api_key:
            vendors.append('gptzero')
        if self.huggingface_api_key:
            vendors.append('huggingface')
        return vendors

    @property
    def is_configured(self) -> bool:
        return bool(self.available_vendors)

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Send a request, retrying transport errors with exponential backoff.

        Returns:
            The completed response, whatever its status code.

        Raises:
            UpstreamTimeout / UpstreamNetworkError once retries are exhausted,
            or the classified error for a non-retryable transport failure.
        """
        kwargs.setdefault('timeout', self.timeout)
        attempt = 0
        while True:
            try:
                return self.session.request(method, url, **kwargs)
            except requests.RequestException as e:
                if attempt < self.max_retries and is_retryable_error(e):
                    delay = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"API request failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay:.1f}s"
                    )
                    self._sleep(delay)
                    attempt += 1
                    continue
                raise classify_api_error(e) from e

    def _check_response(self, response: requests.Response, vendor: str):
        if response.ok:
            return
        status = response.status_code
        if status in (401, 403):
            raise UpstreamMisconfigured(
                f"{vendor} API key is invalid or expired (HTTP {status}). Check the server configuration.",
                status_code=status,
            )
        body = (response.text or 'Unknown error')[:200]
        raise error_for_status(status, f"{vendor} API error ({status}): {body}")

    def _json(self, response: requests.Response, vendor: str):
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnknownError(f"{vendor} returned a response that is not JSON") from e

    def detect_text_with_gptzero(self, text: str) -> Dict:
        """Return GPTZero's document-level prediction for ``text``."""
        if not self.gptzero_api_key:
            raise UpstreamMisconfigured('GPTZero API key is not configured.')

        response = self.request('POST', GPTZERO_URL, json={'document': text}, headers={
            'Content-Type': 'application/json',
            'x-api-key': self.gptzero_api_key,
        })
        self._check_response(response, 'GPTZero')
        data = self._json(response, 'GPTZero')

        try:
            document = data['documents'][0]
            probability = float(document['completely_generated_prob'])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamUnknownError('GPTZero response is missing completely_generated_prob') from e

        return {
            'probability': min(1.0, max(0.0, probability)),
            'classification': document.get('predicted_class') or document.get('document_classification'),
        }

    def detect_text_with_huggingface(self, text: str) -> Dict:
        """Return the hosted RoBERTa detector's probability that ``text`` is machine-written."""
        if not self.huggingface_api_key:
            raise UpstreamMisconfigured('Hugging Face API key is not configured.')

        response = self.request('POST', HUGGINGFACE_URL, json={'inputs': text}, headers={
            'Authorization': f'Bearer {self.huggingface_api_key}',
            'Content-Type': 'application/json',
        })
        self._check_response(response, 'Hugging Face')
        data = self._json(response, 'Hugging Face')

        # Shape: [[{"label": "Fake", "score": 0.9}, {"label": "Real", "score": 0.1}]]
        try:
            labels = data[0] if isinstance(data[0], list) else data
            score = next(float(item['score']) for item in labels
                         if str(item.get('label', '')).upper() == 'FAKE')
        except (StopIteration, IndexError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise UpstreamUnknownError('Hugging Face response has no FAKE label score') from e

        return {
            'probability': min(1.0, max(0.0, score)),
            'model': HUGGINGFACE_MODEL,
        }

    def close(self):
        self.session.close()
