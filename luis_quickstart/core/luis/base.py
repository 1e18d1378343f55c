"""
Shared HTTP plumbing for the LUIS authoring and runtime clients.

Both clients talk JSON over HTTPS to a Cognitive Services resource and
authenticate with the resource key in the Ocp-Apim-Subscription-Key header.
Errors are logged here and re-raised as httpx exceptions; the quickstart
decides what they mean.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Optional

import httpx

from ..errors import RemoteOperationError

KEY_HEADER = "Ocp-Apim-Subscription-Key"


class UnexpectedResponseError(httpx.DecodingError):
    """A 2xx response whose body is not JSON or not the expected shape."""

    def __init__(self, message: str, response: httpx.Response):
        super().__init__(message, request=response.request)
        self.response = response


class LuisHttpClient:
    """
    Thin async JSON client bound to one endpoint and base path.

    Usage:
        async with LuisHttpClient(endpoint, "luis/authoring/v3.0-preview/", key) as http:
            app_id = await http.request("POST", "apps/", json={...})
    """

    def __init__(
        self,
        endpoint: str,
        base_path: str,
        key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger_name: str = "luis",
    ):
        """
        Args:
            endpoint: Resource endpoint, e.g. "https://contoso.cognitiveservices.azure.com/"
            base_path: API path appended to the endpoint
            key: Resource key sent in the subscription header
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = endpoint.rstrip("/") + "/" + base_path.strip("/") + "/"
        self.timeout = timeout
        self.log = logging.getLogger(logger_name)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={KEY_HEADER: key, "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body (None if empty).

        Args:
            parse: Optional converter applied to the decoded body; a
                KeyError, TypeError, AttributeError or ValueError from it
                means the service answered with an unexpected shape

        Raises:
            UnexpectedResponseError: On a 2xx body that cannot be decoded or parsed
            httpx.HTTPStatusError: On a non-2xx response
            httpx.TimeoutException: If the request timed out
            httpx.RequestError: On other network errors
        """
        self.log.debug("%s %s%s params=%s", method, self.base_url, path, params)
        try:
            response = await self._client.request(method, path, json=json, params=params)
            response.raise_for_status()
        except httpx.TimeoutException:
            self.log.error("%s %s timed out after %.1fs", method, path, self.timeout)
            raise
        except httpx.HTTPStatusError as e:
            self.log.error("%s %s failed: %s %s", method, path, e.response.status_code, e.response.text)
            raise
        except httpx.RequestError as e:
            self.log.error("%s %s network error: %s", method, path, e)
            raise

        try:
            payload = response.json() if response.content else None
        except ValueError:
            self.log.error("%s %s returned a non-JSON body: %.200s", method, path, response.text)
            raise UnexpectedResponseError(
                f"{method} {path} returned a non-JSON body ({response.headers.get('content-type', 'no content-type')})",
                response,
            ) from None
        if parse is None:
            return payload
        try:
            return parse(payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            self.log.error("%s %s returned an unexpected payload: %.200s", method, path, response.text)
            raise UnexpectedResponseError(
                f"{method} {path} returned an unexpected payload ({type(e).__name__}: {e})", response
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


@contextmanager
def remote_operation(step: str, context: Optional[dict[str, Any]] = None):
    """
    Re-raise httpx failures and malformed responses inside the block as
    RemoteOperationError.

    Usage:
        with remote_operation("publish", {"app_id": app_id}):
            await client.apps.publish(app_id, "0.1")
    """
    try:
        yield
    except httpx.HTTPStatusError as e:
        raise RemoteOperationError(
            f"{e.request.method} {e.request.url.path} returned {e.response.status_code}: {e.response.text}",
            step=step,
            status_code=e.response.status_code,
            context=context,
        ) from e
    except UnexpectedResponseError as e:
        raise RemoteOperationError(
            str(e), step=step, status_code=e.response.status_code, context=context
        ) from e
    except httpx.HTTPError as e:
        raise RemoteOperationError(f"{type(e).__name__}: {e}", step=step, context=context) from e
