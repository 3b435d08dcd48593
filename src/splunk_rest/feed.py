"""
Atom feed parsing

Splunk answers most REST calls with an Atom ``<feed>`` whose entries carry
their properties in ``<s:dict>``/``<s:key>``/``<s:list>``/``<s:item>``
structures, and answers errors and a few actions with a bare
``<response>`` document. Both are parsed here into plain Python values.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from xml.parsers.expat import ExpatError

import xmltodict

from .errors import SplunkError
from .messages import Message, MessageType

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"
SPLUNK_NS = "http://dev.splunk.com/ns/rest"
OPENSEARCH_NS = "http://a9.com/-/spec/opensearch/1.1/"

# Every namespace we know about is collapsed to bare local names
NAMESPACES = {
    ATOM_NS: None,
    SPLUNK_NS: None,
    OPENSEARCH_NS: None,
    OPENSEARCH_NS.rstrip("/"): None,
}

ROOT_ELEMENTS = ("feed", "response")
FORCE_LIST = ("entry", "msg", "key", "item", "link")


@dataclass(frozen=True)
class Pagination:
    offset: int = 0
    items_per_page: int = 0
    total_results: int = 0


@dataclass
class AtomEntry:
    id: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    updated: Optional[str] = None
    published: Optional[str] = None
    links: Dict[str, str] = field(default_factory=dict)
    content: Any = None


@dataclass
class AtomFeed:
    root: str = "feed"
    id: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    updated: Optional[str] = None
    pagination: Pagination = field(default_factory=Pagination)
    messages: List[Message] = field(default_factory=list)
    entries: List[AtomEntry] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)


def check_cancelled(cancel: Optional[asyncio.Event]):
    """Abort the current operation if its cancellation token has been set"""
    if cancel is not None and cancel.is_set():
        raise asyncio.CancelledError()


def _children(node: Dict[str, Any]):
    for name, value in node.items():
        if name.startswith("@") or name == "#text":
            continue
        yield name, value


def _text(node: Any) -> Optional[str]:
    if node is None:
        return None
    if isinstance(node, dict):
        node = node.get("#text")
        if node is None:
            return None
    text = str(node).strip()
    return text or None


def load_value(node: Any) -> Any:
    """Convert one parsed element into a str, dict, list or None"""
    if node is None or isinstance(node, str):
        return _text(node)

    if "dict" in node:
        return load_dict(node["dict"])
    if "list" in node:
        return load_list(node["list"])

    children = dict(_children(node))
    if not children:
        return _text(node)

    value = {}
    for name, child in children.items():
        if isinstance(child, list):
            value[name] = [load_value(item) for item in child]
        else:
            value[name] = load_value(child)
    return value


def load_dict(node: Any) -> Dict[str, Any]:
    """Parse the contents of an ``<s:dict>`` element"""
    if node is None:
        return {}
    if not isinstance(node, dict):
        raise SplunkError.malformed("Expected <key> elements inside <dict>")

    value = {}
    for name, keys in _children(node):
        if name != "key":
            raise SplunkError.malformed(f"Unexpected <{name}> inside <dict>")
        for key in keys:
            if not isinstance(key, dict) or "@name" not in key:
                raise SplunkError.malformed("<key> element without a name attribute")
            value[key["@name"]] = load_value(key)
    return value


def load_list(node: Any) -> List[Any]:
    """Parse the contents of an ``<s:list>`` element"""
    if node is None:
        return []
    if not isinstance(node, dict):
        raise SplunkError.malformed("Expected <item> elements inside <list>")

    value = []
    for name, items in _children(node):
        if name != "item":
            raise SplunkError.malformed(f"Unexpected <{name}> inside <list>")
        value.extend(load_value(item) for item in items)
    return value


def load_messages(node: Any) -> List[Message]:
    """Parse a ``<messages>`` element into Messages, in document order"""
    if node is None:
        return []
    if not isinstance(node, dict):
        raise SplunkError.malformed("Expected <msg> elements inside <messages>")

    messages = []
    for name, items in _children(node):
        if name != "msg":
            raise SplunkError.malformed(f"Unexpected <{name}> inside <messages>")
        for item in items:
            if not isinstance(item, dict) or "@type" not in item:
                raise SplunkError.malformed("<msg> element without a type attribute")
            try:
                severity = MessageType.parse(item["@type"])
            except ValueError as e:
                raise SplunkError.malformed(str(e)) from e
            messages.append(Message(severity, item.get("#text") or ""))
    return messages


def _load_entry(node: Any) -> AtomEntry:
    if not isinstance(node, dict):
        raise SplunkError.malformed("Empty <entry> element")

    links = {}
    for link in node.get("link", []):
        if isinstance(link, dict) and "@rel" in link and "@href" in link:
            links[link["@rel"]] = link["@href"]

    author = node.get("author")
    return AtomEntry(
        id=_text(node.get("id")),
        title=_text(node.get("title")),
        author=_text(author.get("name")) if isinstance(author, dict) else _text(author),
        updated=_text(node.get("updated")),
        published=_text(node.get("published")),
        links=links,
        content=load_value(node.get("content")),
    )


def _integer(node: Dict[str, Any], *names: str) -> Optional[int]:
    for name in names:
        value = node.get(name)
        if value is None:
            continue
        try:
            return int(_text(value))
        except (TypeError, ValueError):
            raise SplunkError.malformed(f"Invalid pagination value for {name.lstrip('@')}: {value!r}") from None
    return None


def _load_pagination(node: Dict[str, Any], count: int) -> Pagination:
    offset = _integer(node, "startIndex", "@offset", "@startIndex")
    items_per_page = _integer(node, "itemsPerPage", "@itemsPerPage")
    total_results = _integer(node, "totalResults", "@totalResults")
    return Pagination(
        offset=offset if offset is not None else 0,
        items_per_page=items_per_page if items_per_page is not None else count,
        total_results=total_results if total_results is not None else count,
    )


def parse_feed(text: Union[str, bytes], cancel: Optional[asyncio.Event] = None) -> AtomFeed:
    """
    Parse a Splunk ``<feed>`` or ``<response>`` document.

    Args:
        text: The XML body of a response
        cancel: Optional cancellation token, checked between entries

    Returns:
        The parsed AtomFeed

    Raises:
        SplunkError: MALFORMED_RESPONSE if the document does not follow
            the feed grammar
        asyncio.CancelledError: if ``cancel`` is set while parsing
    """
    check_cancelled(cancel)

    try:
        document = xmltodict.parse(
            text,
            process_namespaces=True,
            namespaces=NAMESPACES,
            force_list=FORCE_LIST,
        )
    except ExpatError as e:
        raise SplunkError.malformed(f"Response body is not well-formed XML: {e}") from e

    (root, node), = document.items()
    if root not in ROOT_ELEMENTS:
        raise SplunkError.malformed(f"Expected <feed> or <response> root element, found <{root}>")
    if node is None:
        node = {}
    elif not isinstance(node, dict):
        raise SplunkError.malformed(f"Unexpected text content in <{root}>")

    feed = AtomFeed(root=root, messages=load_messages(node.get("messages")))

    if root == "response":
        for name, child in _children(node):
            if name != "messages":
                feed.properties[name] = load_value(child)
        return feed

    entries = []
    for item in node.get("entry", []):
        check_cancelled(cancel)
        entries.append(_load_entry(item))

    author = node.get("author")
    feed.id = _text(node.get("id"))
    feed.title = _text(node.get("title"))
    feed.author = _text(author.get("name")) if isinstance(author, dict) else _text(author)
    feed.updated = _text(node.get("updated"))
    feed.pagination = _load_pagination(node, len(entries))
    feed.entries = entries

    logger.debug(f"Parsed feed {feed.title!r} with {len(entries)} entries")
    return feed
