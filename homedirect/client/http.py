"""
Thin JSON client over ``httpx`` that turns failures into typed client errors.
"""

from typing import Any, Dict, Mapping, Optional, Type
from homedirect.client.errors import HomeDirectError, NetworkOrServerFailure
import httpx
import logging

logger = logging.getLogger(__name__)

ErrorMap = Mapping[int, Type[HomeDirectError]]


def extract_error_message(response: httpx.Response) -> str:
    """
    Pull a human-readable message out of an error response.

    Understands the API's ``{"error": {"message": ...}}`` shape and falls back
    to ``message``/``detail`` keys, the raw text, then the reason phrase.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "detail"):
            if body.get(key):
                return str(body[key])

    text = response.text.strip()
    if text and body is None:
        return text
    return response.reason_phrase or f"HTTP {response.status_code}"


def extract_error_code(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("code")
    return None


class ApiClient:
    """
    Sends requests and decodes JSON answers.

    Args:
        http_client: Configured ``httpx.AsyncClient``; its base URL, timeout
            and cookie jar apply to every request
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        errors: Optional[ErrorMap] = None
    ) -> Any:
        """
        Perform a request and return the decoded body (None when empty).

        Args:
            method: HTTP method
            path: Path relative to the client's base URL
            json: Optional JSON body
            errors: Status code to error class mapping; unmapped non-2xx
                answers raise NetworkOrServerFailure

        Raises:
            HomeDirectError: A subclass chosen from ``errors``, or NetworkOrServerFailure
        """
        try:
            response = await self.http_client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {type(e).__name__}: {e}")
            raise NetworkOrServerFailure(
                f"Could not reach the server: {e}" if str(e) else "Could not reach the server"
            ) from e

        if not response.is_success:
            error_class = (errors or {}).get(response.status_code, NetworkOrServerFailure)
            message = extract_error_message(response)
            logger.debug(f"{method} {path} answered {response.status_code}: {message}")
            raise error_class(
                message,
                status_code=response.status_code,
                error_code=extract_error_code(response)
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NetworkOrServerFailure(
                "Server returned a malformed response",
                status_code=response.status_code
            ) from e

    async def get(self, path: str, errors: Optional[ErrorMap] = None) -> Any:
        return await self.request("GET", path, errors=errors)

    async def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        errors: Optional[ErrorMap] = None
    ) -> Any:
        return await self.request("POST", path, json=json, errors=errors)
