"""
Splunk server context
Holds connection parameters and the session token, and dispatches HTTP requests
"""

import asyncio
import logging
import ssl
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

import aiohttp

from .config import SplunkConfig
from .errors import ErrorKind, RequestFailure, SplunkError
from .feed import AtomFeed, check_cancelled, parse_feed
from .names import LOGIN, Namespace, ResourceName

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

Arguments = Optional[Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]]


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_args(*args: Arguments) -> List[Tuple[str, str]]:
    """
    Flatten argument mappings into (key, value) pairs.

    List values are repeated under the same key, so ``{"a": [1, 2]}``
    becomes ``a=1&a=2``; ``None`` values are dropped.
    """
    items = []
    for arg in args:
        if arg is None:
            continue
        pairs = arg.items() if isinstance(arg, Mapping) else arg
        for key, value in pairs:
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                items.extend((key, _format_value(v)) for v in value)
            else:
                items.append((key, _format_value(value)))
    return items


class Response:
    """An HTTP response whose body has not been read yet"""

    def __init__(self, response: aiohttp.ClientResponse, address: str):
        self._response = response
        self.address = address

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def reason(self) -> str:
        return self._response.reason or ""

    @property
    def headers(self):
        return self._response.headers

    async def read(self, cancel: Optional[asyncio.Event] = None) -> bytes:
        """Read the body, checking the cancellation token between chunks"""
        chunks = []
        async for chunk in self._response.content.iter_chunked(CHUNK_SIZE):
            check_cancelled(cancel)
            chunks.append(chunk)
        check_cancelled(cancel)
        return b"".join(chunks)

    async def read_text(self, cancel: Optional[asyncio.Event] = None) -> str:
        body = await self.read(cancel)
        return body.decode("utf-8")

    async def read_feed(self, cancel: Optional[asyncio.Event] = None) -> AtomFeed:
        body = await self.read(cancel)
        try:
            return parse_feed(body, cancel)
        except SplunkError as e:
            if e.address is None:
                raise SplunkError.malformed(e.detail, address=self.address) from e
            raise

    async def failure(self) -> Optional[RequestFailure]:
        """Describe this response as a RequestFailure, or None for a 2xx status"""
        if 200 <= self.status < 300:
            return None

        messages = ()
        try:
            messages = tuple((await self.read_feed()).messages)
        except SplunkError as e:
            logger.debug(f"No diagnostic messages in {self.status} response from {self.address}: {e}")

        return RequestFailure(
            kind=ErrorKind.from_status(self.status),
            status=self.status,
            reason=self.reason,
            address=self.address,
            messages=messages,
        )

    async def ensure_status(self, *expected: int):
        """Raise a SplunkError unless the status is one of ``expected``"""
        if self.status in expected:
            return

        failure = await self.failure()
        if failure is None:
            failure = RequestFailure(
                kind=ErrorKind.REQUEST_FAILED,
                status=self.status,
                reason=f"Unexpected status, expected {', '.join(str(s) for s in expected)}",
                address=self.address,
            )
        raise SplunkError.from_failure(failure)

    def release(self):
        self._response.release()

    async def __aenter__(self) -> "Response":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.release()


class Context:
    """Async Splunk REST API context"""

    def __init__(self, config: SplunkConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self.token: Optional[str] = None
        self.base_url = config.base_url

    async def connect(self):
        """Open the HTTP session and authenticate with Splunk"""
        if self.session:
            await self.session.close()

        # Create SSL context for HTTPS
        ssl_context = None
        if self.config.scheme == "https":
            ssl_context = ssl.create_default_context()
            if not self.config.verify_ssl:
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE

        connector = aiohttp.TCPConnector(ssl=ssl_context)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)

        self.session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers={"User-Agent": "splunk-rest/1.0"}
        )

        await self.login()

    async def close(self):
        """Close the HTTP session"""
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> "Context":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def login(self):
        """Obtain a session token"""
        if self.config.token:
            self.token = f"Bearer {self.config.token}"
            logger.info("Using token authentication")
            return

        if not (self.config.username and self.config.password):
            raise ValueError("No authentication method provided. Use either token or username/password.")

        self.token = None
        credentials = {"username": self.config.username, "password": self.config.password}

        async with await self.post(Namespace.DEFAULT, LOGIN, body=credentials) as response:
            await response.ensure_status(200)
            feed = await response.read_feed()

        session_key = feed.properties.get("sessionKey")
        if not session_key:
            raise SplunkError.malformed("Login response has no sessionKey", address=response.address)

        self.token = f"Splunk {session_key}"
        logger.info(f"Logged in to {self.base_url} as {self.config.username}")

    def logout(self):
        """Forget the session token"""
        self.token = None
        logger.info(f"Logged out of {self.base_url}")

    def url(self, namespace: Namespace, name: ResourceName) -> str:
        path = "/".join(part for part in (str(namespace), str(name)) if part)
        return f"{self.base_url}/{path}"

    async def request(
        self,
        method: str,
        namespace: Namespace,
        name: ResourceName,
        args: Arguments = None,
        body: Arguments = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Response:
        """
        Issue exactly one HTTP request against ``namespace``/``name``.

        The status is not checked here; call Response.ensure_status or
        Response.failure on the result.
        """
        if not self.session:
            raise RuntimeError("Context not connected. Call connect() first.")

        check_cancelled(cancel)

        url = self.url(namespace, name)
        headers = {"Authorization": self.token} if self.token else {}
        kwargs = {"headers": headers}

        params = encode_args(args)
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["data"] = encode_args(body)

        response = await self.session.request(method, url, **kwargs)
        logger.debug(f"{method} {url} -> {response.status}")
        return Response(response, url)

    async def get(self, namespace: Namespace, name: ResourceName, args: Arguments = None,
                  cancel: Optional[asyncio.Event] = None) -> Response:
        return await self.request("GET", namespace, name, args=args, cancel=cancel)

    async def post(self, namespace: Namespace, name: ResourceName, args: Arguments = None,
                   body: Arguments = None, cancel: Optional[asyncio.Event] = None) -> Response:
        return await self.request("POST", namespace, name, args=args, body=body, cancel=cancel)

    async def delete(self, namespace: Namespace, name: ResourceName, args: Arguments = None,
                     cancel: Optional[asyncio.Event] = None) -> Response:
        return await self.request("DELETE", namespace, name, args=args, cancel=cancel)

    def __repr__(self) -> str:
        return f"Context({self.base_url})"
