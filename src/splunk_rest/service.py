"""
Splunk service root

Owns the Context and hands out endpoints for the resource kinds this
library knows about.
"""

import asyncio
import logging
from typing import Optional

from .config import SplunkConfig
from .context import Context
from .endpoint import (
    CONFIGURATION_KIND,
    INDEX_KIND,
    SERVER_INFO_KIND,
    ApplicationCollectionEndpoint,
    CollectionEndpoint,
    ConfigurationStanzaEndpoint,
    Endpoint,
    JobCollectionEndpoint,
    SavedSearchCollectionEndpoint,
)
from .entity import Entity
from .names import Namespace

logger = logging.getLogger(__name__)


class Service:
    """Entry point to a Splunk server"""

    def __init__(self, config: SplunkConfig, namespace: Optional[Namespace] = None):
        self.config = config
        self.context = Context(config)
        self.namespace = namespace if namespace is not None else config.namespace

    async def connect(self) -> "Service":
        """Open the HTTP session and log in"""
        await self.context.connect()
        logger.info(f"Connected to {self.context.base_url} in namespace {self.namespace}")
        return self

    async def close(self):
        await self.context.close()

    async def __aenter__(self) -> "Service":
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def login(self):
        await self.context.login()

    def logout(self):
        self.context.logout()

    @property
    def applications(self) -> ApplicationCollectionEndpoint:
        return ApplicationCollectionEndpoint(self.context, self.namespace)

    @property
    def saved_searches(self) -> SavedSearchCollectionEndpoint:
        return SavedSearchCollectionEndpoint(self.context, self.namespace)

    @property
    def jobs(self) -> JobCollectionEndpoint:
        return JobCollectionEndpoint(self.context, self.namespace)

    @property
    def indexes(self) -> CollectionEndpoint:
        return CollectionEndpoint(self.context, self.namespace, INDEX_KIND)

    @property
    def configurations(self) -> CollectionEndpoint:
        """The configuration files known to the server"""
        return CollectionEndpoint(self.context, self.namespace, CONFIGURATION_KIND)

    def configuration(self, file: str) -> ConfigurationStanzaEndpoint:
        """The stanzas of one configuration file, e.g. ``configuration("props")``"""
        return ConfigurationStanzaEndpoint(self.context, self.namespace, file)

    async def server_info(self, cancel: Optional[asyncio.Event] = None) -> Entity:
        """Get server information"""
        endpoint = Endpoint(self.context, self.namespace, SERVER_INFO_KIND.path)
        return await endpoint.fetch(SERVER_INFO_KIND.new_entity(), cancel=cancel)
