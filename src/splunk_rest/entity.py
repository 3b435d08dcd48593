"""
Entities and entity collections materialized from Atom feeds

An Entity is built empty and initialized from a parsed feed. It never
changes after that except by a full refetch (``refresh``), which replaces
its state wholesale. Operations that change server-side state, such as
``update`` or ``remove``, leave the local copy untouched.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Iterator, List, Optional, Type
from urllib.parse import urlparse

from pydantic import ValidationError

from .errors import SplunkError
from .feed import AtomEntry, AtomFeed, Pagination, check_cancelled
from .messages import Message
from .models import EntityContent
from .names import Namespace, ResourceName

logger = logging.getLogger(__name__)


class Entity(Mapping):
    """A single Splunk resource: a read-only mapping of its content fields"""

    def __init__(self, content_model: Type[EntityContent] = EntityContent):
        self.content_model = content_model
        self._context = None
        self._namespace: Optional[Namespace] = None
        self._resource_name: Optional[ResourceName] = None
        self._entry: Optional[AtomEntry] = None
        self._fields: Dict[str, Any] = {}
        self._content: Optional[EntityContent] = None

    def initialize(self, context, feed: AtomFeed, cancel: Optional[asyncio.Event] = None):
        """Populate this entity from a feed holding exactly one entry"""
        check_cancelled(cancel)
        if len(feed.entries) != 1:
            raise SplunkError.malformed(f"Expected exactly one entry in feed, found {len(feed.entries)}")
        self.load(context, feed.entries[0])

    def load(self, context, entry: AtomEntry):
        fields = entry.content if entry.content is not None else {}
        if not isinstance(fields, dict):
            raise SplunkError.malformed(f"Entry {entry.title!r} has no property dictionary")

        try:
            content = self.content_model.model_validate(fields)
        except ValidationError as e:
            raise SplunkError.malformed(f"Invalid content for entry {entry.title!r}: {e}") from e

        path = entry.links.get("alternate") or urlparse(entry.id or "").path
        try:
            namespace, resource_name = Namespace.parse_path(path)
        except ValueError as e:
            raise SplunkError.malformed(f"Entry {entry.title!r} has no usable address") from e

        self._context = context
        self._namespace = namespace
        self._resource_name = resource_name
        self._entry = entry
        self._fields = fields
        self._content = content

    @property
    def is_initialized(self) -> bool:
        return self._entry is not None

    def _require_entry(self) -> AtomEntry:
        if self._entry is None:
            raise RuntimeError("Entity has not been initialized")
        return self._entry

    @property
    def name(self) -> Optional[str]:
        return self._require_entry().title

    @property
    def id(self) -> Optional[str]:
        return self._require_entry().id

    @property
    def author(self) -> Optional[str]:
        return self._require_entry().author

    @property
    def updated(self) -> Optional[str]:
        return self._require_entry().updated

    @property
    def links(self) -> Dict[str, str]:
        return dict(self._require_entry().links)

    @property
    def content(self) -> EntityContent:
        self._require_entry()
        return self._content

    @property
    def namespace(self) -> Optional[Namespace]:
        return self._namespace

    @property
    def resource_name(self) -> Optional[ResourceName]:
        return self._resource_name

    @property
    def address(self) -> str:
        self._require_entry()
        return self._context.url(self._namespace, self._resource_name)

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        content = self.__dict__.get("_content")
        if content is None:
            raise AttributeError(name)
        return getattr(content, name)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return (self._resource_name, self._namespace, self._fields) == (
            other._resource_name, other._namespace, other._fields)

    __hash__ = None

    async def refresh(self, cancel: Optional[asyncio.Event] = None) -> "Entity":
        """Refetch this entity and replace its state"""
        self._require_entry()
        async with await self._context.get(self._namespace, self._resource_name, cancel=cancel) as response:
            await response.ensure_status(200)
            feed = await response.read_feed(cancel)
        self.initialize(self._context, feed, cancel)
        return self

    async def update(self, cancel: Optional[asyncio.Event] = None, **attributes):
        """Post new attribute values; call refresh() to observe them"""
        self._require_entry()
        async with await self._context.post(self._namespace, self._resource_name,
                                            body=attributes, cancel=cancel) as response:
            await response.ensure_status(200)

    async def remove(self, cancel: Optional[asyncio.Event] = None):
        """Delete this entity on the server"""
        self._require_entry()
        async with await self._context.delete(self._namespace, self._resource_name, cancel=cancel) as response:
            await response.ensure_status(200)

    def __repr__(self) -> str:
        if self._entry is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({self._resource_name!s})"


class EntityCollection(Sequence):
    """One page of entities of a single kind plus its pagination metadata"""

    def __init__(self, entity_factory: Callable[[], Entity] = Entity):
        self._entity_factory = entity_factory
        self._entities: List[Entity] = []
        self.pagination = Pagination()
        self.messages: List[Message] = []

    def initialize(self, context, feed: AtomFeed, cancel: Optional[asyncio.Event] = None):
        """Replace the contents of this collection with the entries of ``feed``"""
        entities = []
        for entry in feed.entries:
            check_cancelled(cancel)
            entity = self._entity_factory()
            entity.load(context, entry)
            entities.append(entity)

        self._entities = entities
        self.pagination = feed.pagination
        self.messages = list(feed.messages)
        logger.debug(f"Loaded {len(entities)} entities at offset {self.pagination.offset}")

    def get(self, name: str) -> Optional[Entity]:
        """Find an entity on this page by name"""
        for entity in self._entities:
            if entity.name == name:
                return entity
        return None

    def __getitem__(self, index):
        return self._entities[index]

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} of {self.pagination.total_results})"
