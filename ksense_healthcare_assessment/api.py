"""
HTTP access to the assessment API.

Every call goes through ApiClient.request, which retries rate limits (429),
server errors (5xx) and network failures with a fixed backoff policy and
fails fast on any other 4xx.
"""

import logging
import time

import requests

from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
BASE_DELAY = 1.0  # seconds

RATE_LIMITED = "rate_limited"
SERVER_ERROR = "server_error"
NETWORK_ERROR = "network_error"


class ApiError(Exception):
    """Base class for failures surfaced by ApiClient."""


class ClientError(ApiError):
    """A 4xx response other than 429. Never retried."""

    def __init__(self, status_code, body, url):
        super().__init__(f"Request failed: {status_code} {body}")
        self.status_code = status_code
        self.body = body
        self.url = url


class MaxRetriesError(ApiError):
    def __init__(self, url, attempts):
        super().__init__(f"Max retries reached for {url}")
        self.url = url
        self.attempts = attempts


def backoff_delay(reason, attempt, base_delay=BASE_DELAY):
    """Seconds to wait after the failed attempt with 0-based index `attempt`."""
    if reason == RATE_LIMITED:
        return base_delay * (attempt + 1)
    return base_delay * 2 ** attempt


def retry_reason(status_code):
    """Map a non-2xx status to a retry reason, or None when it is terminal."""
    if status_code == 429:
        return RATE_LIMITED
    if status_code >= 500:
        return SERVER_ERROR
    return None


def retry_decision(reason, attempt, max_attempts=MAX_ATTEMPTS, base_delay=BASE_DELAY):
    """Delay before the next attempt, or None when the budget is spent."""
    if attempt + 1 >= max_attempts:
        return None
    return backoff_delay(reason, attempt, base_delay)


class ApiClient:
    def __init__(
        self,
        api_key,
        base_url=DEFAULT_BASE_URL,
        timeout=DEFAULT_TIMEOUT,
        session=None,
        max_attempts=MAX_ATTEMPTS,
        base_delay=BASE_DELAY,
        sleep=time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep
        self.session = session or requests.Session()
        self.session.headers.update({
            "x-api-key": api_key,
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, settings, **kwargs):
        return cls(settings.api_key, base_url=settings.base_url, timeout=settings.timeout, **kwargs)

    def request(self, method, path, params=None, json=None, headers=None):
        """Send one logical request and return the decoded JSON body.

        Raises ClientError on a terminal 4xx and MaxRetriesError once every
        attempt has failed.
        """
        url = f"{self.base_url}{path}"
        last_error = None

        for attempt in range(self.max_attempts):
            try:
                r = self.session.request(
                    method, url, params=params, json=json, headers=headers, timeout=self.timeout
                )
                if r.ok:
                    return r.json()
            except (requests.RequestException, ValueError) as e:
                # connection failures, timeouts and undecodable 2xx bodies
                last_error = e
                logger.error(f"Error on attempt {attempt + 1} for {url}: {e}")
                delay = retry_decision(NETWORK_ERROR, attempt, self.max_attempts, self.base_delay)
                if delay is None:
                    break
                self._sleep(delay)
                continue

            reason = retry_reason(r.status_code)
            if reason is None:
                raise ClientError(r.status_code, r.text, url)

            last_error = None
            delay = retry_decision(reason, attempt, self.max_attempts, self.base_delay)
            if reason == RATE_LIMITED:
                logger.warning(f"Rate limit hit on {url} (attempt {attempt + 1}/{self.max_attempts})")
            else:
                logger.warning(
                    f"Server error ({r.status_code}) on {url} (attempt {attempt + 1}/{self.max_attempts})"
                )
            if delay is None:
                break
            logger.warning(f"Retrying in {delay:.1f}s...")
            self._sleep(delay)

        raise MaxRetriesError(url, self.max_attempts) from last_error

    def get_json(self, path, params=None):
        return self.request("GET", path, params=params)

    def post_json(self, path, body):
        return self.request("POST", path, json=body)

    def close(self):
        self.session.close()
