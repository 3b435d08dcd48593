"""
Generic endpoints for Splunk REST resources

Every resource kind (applications, saved searches, jobs, ...) is described
by a ResourceKind value rather than a subclass. EntityEndpoint and
CollectionEndpoint use it to build resource names and materialize entities.
Each method issues one HTTP call and never refreshes entities obtained
earlier; fetch again to observe the effect of a mutation.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Optional, Type

from .context import Arguments, Context
from .entity import Entity, EntityCollection
from .errors import SplunkError
from .models import (
    ApplicationArchiveContent,
    ApplicationContent,
    ApplicationSetupContent,
    ApplicationUpdateContent,
    ConfigurationStanzaContent,
    EntityContent,
    IndexContent,
    JobContent,
    SavedSearchContent,
    ServerInfoContent,
)
from .names import (
    APPS_LOCAL,
    CONFIGS,
    INDEXES,
    JOBS,
    PROPERTIES,
    SAVED_SEARCHES,
    SERVER_INFO,
    Namespace,
    ResourceName,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceKind:
    """
    Describes one kind of Splunk resource.

    ``path`` segments may hold ``str.format`` placeholders, e.g.
    ``("configs", "conf-{file}")``; fill them with ``bind()``.
    """

    name: str
    path: ResourceName
    content_model: Type[EntityContent] = EntityContent
    entity: Type[Entity] = Entity

    def bind(self, **params: str) -> "ResourceKind":
        path = ResourceName([segment.format(**params) for segment in self.path])
        return ResourceKind(self.name, path, self.content_model, self.entity)

    def new_entity(self) -> Entity:
        return self.entity(self.content_model)

    def new_collection(self) -> EntityCollection:
        return EntityCollection(partial(self.entity, self.content_model))


APPLICATIONS = ResourceKind("applications", APPS_LOCAL, ApplicationContent)
SAVED_SEARCH_KIND = ResourceKind("saved_searches", SAVED_SEARCHES, SavedSearchContent)
JOB_KIND = ResourceKind("jobs", JOBS, JobContent)
INDEX_KIND = ResourceKind("indexes", INDEXES, IndexContent)
CONFIGURATION_KIND = ResourceKind("configurations", PROPERTIES)
STANZA_KIND = ResourceKind("configuration_stanzas", ResourceName(CONFIGS, "conf-{file}"), ConfigurationStanzaContent)
SERVER_INFO_KIND = ResourceKind("server_info", SERVER_INFO, ServerInfoContent)


class Endpoint:
    """A Splunk REST address: context + namespace + resource name"""

    def __init__(self, context: Context, namespace: Namespace, name: ResourceName):
        if context is None or namespace is None or name is None:
            raise ValueError("Endpoint requires a context, a namespace and a resource name")
        self.context = context
        self.namespace = namespace
        self.name = name

    @property
    def address(self) -> str:
        return self.context.url(self.namespace, self.name)

    async def fetch(self, entity_or_collection, name: Optional[ResourceName] = None, args: Arguments = None,
                    cancel: Optional[asyncio.Event] = None):
        """GET a feed and initialize ``entity_or_collection`` from it"""
        name = name if name is not None else self.name
        async with await self.context.get(self.namespace, name, args=args, cancel=cancel) as response:
            await response.ensure_status(200)
            feed = await response.read_feed(cancel)
        entity_or_collection.initialize(self.context, feed, cancel)
        return entity_or_collection

    async def _call(self, method: str, name: ResourceName, expected=(200,), args: Arguments = None,
                    body: Arguments = None, read: bool = False, cancel: Optional[asyncio.Event] = None):
        async with await self.context.request(method, self.namespace, name, args=args, body=body,
                                              cancel=cancel) as response:
            await response.ensure_status(*expected)
            if read:
                return await response.read_feed(cancel)
        return None

    def __str__(self) -> str:
        return self.address

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.address})"


class EntityEndpoint(Endpoint):
    """Operations on a single resource of a given kind"""

    def __init__(self, context: Context, namespace: Namespace, kind: ResourceKind, title: str):
        super().__init__(context, namespace, ResourceName(kind.path, title))
        self.kind = kind

    async def get(self, cancel: Optional[asyncio.Event] = None) -> Entity:
        """Retrieve the resource at this address"""
        return await self.fetch(self.kind.new_entity(), cancel=cancel)

    async def update(self, cancel: Optional[asyncio.Event] = None, **attributes):
        """Post new attribute values for the resource"""
        if not attributes:
            return
        await self._call("POST", self.name, body=attributes, cancel=cancel)

    async def remove(self, cancel: Optional[asyncio.Event] = None):
        """Delete the resource"""
        await self._call("DELETE", self.name, cancel=cancel)
        logger.info(f"Removed {self.kind.name} resource {self.name.title}")

    async def enable(self, cancel: Optional[asyncio.Event] = None):
        await self.invoke("enable", cancel=cancel)

    async def disable(self, cancel: Optional[asyncio.Event] = None):
        await self.invoke("disable", cancel=cancel)

    async def invoke(self, action: str, method: str = "POST", args: Arguments = None, read: bool = False,
                     content_model: Type[EntityContent] = EntityContent,
                     cancel: Optional[asyncio.Event] = None) -> Optional[Entity]:
        """
        Call an action sub-resource such as ``disable`` or ``setup``.

        Args:
            action: Sub-resource name appended to this endpoint's name
            method: HTTP method; GET sends ``args`` as the query, others as the body
            args: Arguments for the action
            read: Materialize the response feed as an entity and return it
            content_model: Content model of the returned entity
            cancel: Optional cancellation token

        Returns:
            The entity the server reported when ``read`` is set, otherwise None
        """
        action_name = ResourceName(self.name, action)
        if method == "GET":
            feed = await self._call("GET", action_name, args=args, read=read, cancel=cancel)
        else:
            feed = await self._call(method, action_name, body=args, read=read, cancel=cancel)
        if not read:
            return None

        entity = self.kind.entity(content_model)
        entity.initialize(self.context, feed, cancel)
        return entity


class ApplicationEndpoint(EntityEndpoint):
    """A single application under ``apps/local``"""

    def __init__(self, context: Context, namespace: Namespace, name: str):
        super().__init__(context, namespace, APPLICATIONS, name)

    async def get_setup_info(self, cancel: Optional[asyncio.Event] = None) -> Entity:
        """Setup parameters declared by the application"""
        return await self.invoke("setup", method="GET", read=True, content_model=ApplicationSetupContent,
                                 cancel=cancel)

    async def get_update_info(self, cancel: Optional[asyncio.Event] = None) -> Entity:
        """Whether Splunkbase has a newer version of the application"""
        return await self.invoke("update", method="GET", read=True, content_model=ApplicationUpdateContent,
                                 cancel=cancel)

    async def package(self, cancel: Optional[asyncio.Event] = None) -> Entity:
        """Archive the application on the server and describe the archive"""
        return await self.invoke("package", method="GET", read=True, content_model=ApplicationArchiveContent,
                                 cancel=cancel)


class CollectionEndpoint(Endpoint):
    """Operations on the collection of resources of a given kind"""

    def __init__(self, context: Context, namespace: Namespace, kind: ResourceKind):
        super().__init__(context, namespace, kind.path)
        self.kind = kind

    async def get_all(self, cancel: Optional[asyncio.Event] = None, **args) -> EntityCollection:
        """Retrieve every resource in the collection in one page"""
        return await self.get_slice(offset=0, count=0, cancel=cancel, **args)

    async def get_slice(self, offset: int = 0, count: int = 30, cancel: Optional[asyncio.Event] = None,
                        **args) -> EntityCollection:
        """
        Retrieve one page of the collection.

        Args:
            offset: Index of the first resource to return
            count: Maximum number of resources to return; 0 means all
            cancel: Optional cancellation token
            **args: Extra query arguments such as ``search`` or ``sort_key``

        Returns:
            The page as an EntityCollection; use its ``pagination`` to
            compute the next offset
        """
        if offset < 0 or count < 0:
            raise ValueError("offset and count must be non-negative")
        query = {"offset": offset, "count": count}
        query.update(args)
        return await self.fetch(self.kind.new_collection(), args=query, cancel=cancel)

    async def create(self, name: str, cancel: Optional[asyncio.Event] = None, **attributes) -> Entity:
        """Create a resource and return it as the server reports it"""
        body: Dict[str, Any] = {"name": name}
        body.update(attributes)
        return await self._create(body, cancel)

    async def _create(self, body: Dict[str, Any], cancel: Optional[asyncio.Event]) -> Entity:
        feed = await self._call("POST", self.name, expected=(201,), body=body, read=True, cancel=cancel)
        entity = self.kind.new_entity()
        entity.initialize(self.context, feed, cancel)
        logger.info(f"Created {self.kind.name} resource {entity.name}")
        return entity

    async def reload(self, cancel: Optional[asyncio.Event] = None):
        """Ask Splunk to reload the collection from disk"""
        await self._call("GET", ResourceName(self.name, "_reload"), cancel=cancel)

    def endpoint(self, name: str) -> EntityEndpoint:
        return EntityEndpoint(self.context, self.namespace, self.kind, name)

    async def get(self, name: str, cancel: Optional[asyncio.Event] = None) -> Entity:
        """Retrieve one resource of the collection by name"""
        return await self.endpoint(name).get(cancel=cancel)


class ApplicationCollectionEndpoint(CollectionEndpoint):
    """Installed applications"""

    def __init__(self, context: Context, namespace: Namespace):
        super().__init__(context, namespace, APPLICATIONS)

    def endpoint(self, name: str) -> ApplicationEndpoint:
        return ApplicationEndpoint(self.context, self.namespace, name)

    async def create(self, name: str, template: Optional[str] = None, cancel: Optional[asyncio.Event] = None,
                     **attributes) -> Entity:
        """Create an application, optionally from a template such as ``barebones``"""
        body: Dict[str, Any] = {
            "explicit_appname": name,
            "filename": False,
            "name": name,
            "template": template,
        }
        body.update(attributes)
        return await self._create(body, cancel)

    async def install(self, path: str, name: Optional[str] = None, update: bool = False,
                      cancel: Optional[asyncio.Event] = None) -> Entity:
        """
        Install an application from an archive.

        Args:
            path: Archive location on the server's filesystem, or a URL
            name: Name to install the application under; defaults to the
                name recorded in the archive
            update: Overwrite an existing application of the same name
            cancel: Optional cancellation token

        Returns:
            The installed application
        """
        body: Dict[str, Any] = {
            "explicit_appname": name,
            "filename": True,
            "name": path,
            "update": update,
        }
        return await self._create(body, cancel)


class ConfigurationStanzaEndpoint(CollectionEndpoint):
    """Stanzas of one configuration file, e.g. ``props``"""

    def __init__(self, context: Context, namespace: Namespace, file: str):
        super().__init__(context, namespace, STANZA_KIND.bind(file=file))
        self.file = file

    async def create(self, name: str, cancel: Optional[asyncio.Event] = None, **settings) -> Entity:
        """Create a stanza; Splunk names it from the ``__stanza`` argument"""
        body: Dict[str, Any] = {"__stanza": name}
        body.update(settings)
        return await self._create(body, cancel)

    def setting_name(self, stanza: str, key: str) -> ResourceName:
        return ResourceName(PROPERTIES, self.file, stanza, key)

    async def get_setting(self, stanza: str, key: str, cancel: Optional[asyncio.Event] = None) -> str:
        """Value of one setting; Splunk returns it as plain text"""
        name = self.setting_name(stanza, key)
        async with await self.context.get(self.namespace, name, cancel=cancel) as response:
            await response.ensure_status(200)
            return await response.read_text(cancel)

    async def update_setting(self, stanza: str, key: str, value: Any, cancel: Optional[asyncio.Event] = None):
        """Set one setting; stanzas fetched earlier keep the old value"""
        await self._call("POST", self.setting_name(stanza, key), body={"value": value}, cancel=cancel)
        logger.info(f"Updated [{stanza}] {key} in {self.file}.conf")


class JobCollectionEndpoint(CollectionEndpoint):
    """Search jobs"""

    def __init__(self, context: Context, namespace: Namespace):
        super().__init__(context, namespace, JOB_KIND)

    async def create_job(self, search: str, cancel: Optional[asyncio.Event] = None, **args) -> EntityEndpoint:
        """Start a search job and return the endpoint of the new job"""
        body: Dict[str, Any] = {"search": search}
        body.update(args)
        async with await self.context.post(self.namespace, self.name, body=body, cancel=cancel) as response:
            await response.ensure_status(201)
            feed = await response.read_feed(cancel)

        sid = feed.properties.get("sid")
        if not sid:
            raise SplunkError.malformed("Job creation response has no sid", address=response.address)
        logger.info(f"Created search job: {sid}")
        return self.endpoint(sid)


class SavedSearchCollectionEndpoint(CollectionEndpoint):
    """Saved searches"""

    def __init__(self, context: Context, namespace: Namespace):
        super().__init__(context, namespace, SAVED_SEARCH_KIND)

    async def dispatch(self, name: str, cancel: Optional[asyncio.Event] = None, **args) -> str:
        """Run a saved search now and return the sid of the resulting job"""
        dispatch_name = ResourceName(self.name, name, "dispatch")
        async with await self.context.post(self.namespace, dispatch_name, body=args, cancel=cancel) as response:
            await response.ensure_status(200, 201)
            feed = await response.read_feed(cancel)

        sid = feed.properties.get("sid")
        if not sid:
            raise SplunkError.malformed("Dispatch response has no sid", address=response.address)
        return sid
