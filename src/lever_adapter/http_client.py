"""
HTTPClient module for fetching pages from the Lever API with basic authentication
"""

import logging
import requests
from typing import Any, Optional
from dataclasses import dataclass

from lever_adapter.endpoint_registry import SyncTarget


logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a request fails below the HTTP layer (connection, timeout)"""
    pass


class NotFoundError(Exception):
    """Raised when the requested resource does not exist (HTTP 404)"""

    def __init__(self, url: str):
        super().__init__(f"Received 404 from {url}")
        self.url = url


class UnexpectedStatusError(Exception):
    """Raised for any other non-2xx response"""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"Received {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class DecodeError(Exception):
    """Raised when a response body does not have the expected shape"""
    pass


@dataclass(frozen=True)
class PageEnvelope:
    """Decoded response wrapper returned by every Lever list endpoint"""
    data: Any
    next_cursor: str = ""
    has_next: bool = False

    @classmethod
    def from_json(cls, body: Any, url: str) -> 'PageEnvelope':
        """
        Validate a decoded response body and wrap it

        Args:
            body: Parsed JSON body
            url: Request URL, used in error messages

        Returns:
            PageEnvelope for the body

        Raises:
            DecodeError: If the body is not a {data, next, hasNext} object
        """
        if not isinstance(body, dict):
            raise DecodeError(f"Expected a JSON object from {url}, got {type(body).__name__}")

        if 'data' not in body:
            raise DecodeError(f"Response from {url} is missing the data field")

        next_cursor = body.get('next')
        if next_cursor is None:
            next_cursor = ""
        if not isinstance(next_cursor, str):
            raise DecodeError(f"Response from {url} has a non-string next cursor: {next_cursor!r}")

        has_next = body.get('hasNext', False)
        if not isinstance(has_next, bool):
            raise DecodeError(f"Response from {url} has a non-boolean hasNext: {has_next!r}")

        # Following an empty cursor would request the first page again forever
        if has_next and not next_cursor:
            raise DecodeError(f"Response from {url} sets hasNext without a next cursor")

        return cls(data=body['data'], next_cursor=next_cursor, has_next=has_next)


class HTTPClient:
    """HTTP client for the Lever API: basic auth, one request per page, no retries"""

    def __init__(self, token: str, base_url: str = "https://api.lever.co/v1",
                 timeout_seconds: float = 10.0, session: Optional[requests.Session] = None):
        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.session = session

    def build_url(self, target: SyncTarget) -> str:
        """Absolute URL for the target's collection, without query parameters"""
        return f"{self.base_url}/{target.resolved_path().lstrip('/')}"

    def fetch_page(self, target: SyncTarget) -> PageEnvelope:
        """
        Fetch the page the target's cursor points at and advance the cursor

        Args:
            target: Bound endpoint whose cursor is updated in place

        Returns:
            PageEnvelope for the fetched page

        Raises:
            TransportError: If the request could not be completed
            NotFoundError: If the server answered 404
            UnexpectedStatusError: For any other non-2xx status
            DecodeError: If the body is not a valid page envelope
        """
        if self.session is None:
            self.session = requests.Session()

        url = self.build_url(target)
        params = target.request_parameters()

        try:
            response = self.session.request(
                target.method,
                url,
                params=params,
                auth=(self.token, ""),
                timeout=self.timeout_seconds
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(url)

        if not 200 <= response.status_code < 300:
            raise UnexpectedStatusError(response.status_code, url)

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(f"Response from {url} is not valid JSON: {e}") from e

        envelope = PageEnvelope.from_json(body, url)

        # Track next token for the target
        target.cursor.offset = envelope.next_cursor
        target.cursor.has_next = envelope.has_next

        logger.debug(f"Fetched {url} with {params} (hasNext={envelope.has_next})")
        return envelope

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
