"""
Shared fixtures: a fake aiohttp session and Atom feed builders
"""

from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock
from urllib.parse import urlparse
from xml.sax.saxutils import escape, quoteattr

import pytest

from splunk_rest.config import SplunkConfig
from splunk_rest.context import Context
from splunk_rest.service import Service

HOST = "splunk.test"

ATOM_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<feed xmlns="http://www.w3.org/2005/Atom" '
    'xmlns:s="http://dev.splunk.com/ns/rest" '
    'xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">'
)


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        keys = "".join(
            f"<s:key name={quoteattr(k)}>{render_value(v)}</s:key>" for k, v in value.items()
        )
        return f"<s:dict>{keys}</s:dict>"
    if isinstance(value, list):
        items = "".join(f"<s:item>{render_value(v)}</s:item>" for v in value)
        return f"<s:list>{items}</s:list>"
    return escape(str(value))


def atom_entry(title: str, path: str, content: Optional[Dict[str, Any]] = None, author: str = "nobody") -> str:
    return (
        "<entry>"
        f"<title>{escape(title)}</title>"
        f"<id>https://{HOST}:8089{path}</id>"
        "<updated>2014-01-01T00:00:00-08:00</updated>"
        f'<link href="{path}" rel="alternate"/>'
        f'<link href="{path}/disable" rel="disable"/>'
        f"<author><name>{escape(author)}</name></author>"
        f'<content type="text/xml">{render_value(content or {})}</content>'
        "</entry>"
    )


def atom_feed(
    entries: List[str] = (),
    total: Optional[int] = None,
    per_page: Optional[int] = None,
    offset: int = 0,
    messages: List[Tuple[str, str]] = (),
    title: str = "feed",
) -> str:
    total = len(entries) if total is None else total
    per_page = len(entries) if per_page is None else per_page
    msgs = "".join(f'<s:msg type="{t}">{escape(text)}</s:msg>' for t, text in messages)
    return (
        ATOM_HEADER
        + f"<title>{escape(title)}</title>"
        + f"<id>https://{HOST}:8089/services/{title}</id>"
        + "<updated>2014-01-01T00:00:00-08:00</updated>"
        + "<author><name>Splunk</name></author>"
        + f"<opensearch:totalResults>{total}</opensearch:totalResults>"
        + f"<opensearch:itemsPerPage>{per_page}</opensearch:itemsPerPage>"
        + f"<opensearch:startIndex>{offset}</opensearch:startIndex>"
        + f"<s:messages>{msgs}</s:messages>"
        + "".join(entries)
        + "</feed>"
    )


def response_document(messages: List[Tuple[str, str]] = (), **properties: str) -> str:
    msgs = "".join(f'<msg type="{t}">{escape(text)}</msg>' for t, text in messages)
    props = "".join(f"<{k}>{escape(v)}</{k}>" for k, v in properties.items())
    body = f"<messages>{msgs}</messages>" if messages else ""
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<response>{body}{props}</response>'


def app_path(name: str) -> str:
    return f"/servicesNS/nobody/system/apps/local/{name}"


class FakeContent:
    """Stands in for aiohttp's StreamReader"""

    def __init__(self, body: bytes, on_chunk=None):
        self._body = body
        self._on_chunk = on_chunk

    async def iter_chunked(self, n: int):
        for i in range(0, len(self._body), n):
            yield self._body[i:i + n]
            if self._on_chunk:
                self._on_chunk()


class FakeResponse:
    def __init__(self, status: int, body: str, reason: str = "", on_chunk=None):
        self.status = status
        self.reason = reason or {200: "OK", 201: "Created", 401: "Unauthorized",
                                 404: "Not Found", 500: "Internal Server Error"}.get(status, "")
        self.headers = {"Content-Type": "text/xml; charset=UTF-8"}
        self.content = FakeContent(body.encode("utf-8"), on_chunk)
        self.release = MagicMock()


class FakeSession:
    """
    Routes (method, path) to canned responses.

    Several responses registered on one route are returned in order; the
    last one keeps being returned once the others are used up.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[FakeResponse]] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    def add(self, method: str, path: str, body: str = "", status: int = 200, **kwargs):
        self.routes.setdefault((method, path), []).append(FakeResponse(status, body, **kwargs))

    async def request(self, method: str, url: str, **kwargs):
        path = urlparse(url).path
        self.calls.append((method, path, kwargs))
        responses = self.routes.get((method, path))
        if not responses:
            return FakeResponse(404, response_document([("ERROR", f"No route for {method} {path}")]))
        return responses.pop(0) if len(responses) > 1 else responses[0]

    async def close(self):
        self.closed = True


@pytest.fixture
def config():
    return SplunkConfig(
        host=HOST,
        port=8089,
        scheme="https",
        token="test-token",
        owner="nobody",
        app="system",
        verify_ssl=False,
        timeout=30
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def context(config, session):
    context = Context(config)
    context.session = session
    context.token = "Splunk test-session-key"
    return context


@pytest.fixture
def service(config, session):
    service = Service(config)
    service.context.session = session
    service.context.token = "Splunk test-session-key"
    return service
