"""
splunk-rest

An async, typed client for the Splunk REST management API
"""

__version__ = "1.0.0"

from .config import SplunkConfig
from .context import Context, Response
from .endpoint import (
    ApplicationCollectionEndpoint,
    ApplicationEndpoint,
    CollectionEndpoint,
    ConfigurationStanzaEndpoint,
    Endpoint,
    EntityEndpoint,
    JobCollectionEndpoint,
    ResourceKind,
    SavedSearchCollectionEndpoint,
)
from .entity import Entity, EntityCollection
from .errors import ErrorKind, RequestFailure, SplunkError
from .feed import AtomEntry, AtomFeed, Pagination, parse_feed
from .messages import Message, MessageType
from .names import Namespace, ResourceName
from .service import Service

__all__ = [
    "SplunkConfig",
    "Context",
    "Response",
    "Endpoint",
    "ApplicationEndpoint",
    "ApplicationCollectionEndpoint",
    "EntityEndpoint",
    "CollectionEndpoint",
    "ConfigurationStanzaEndpoint",
    "JobCollectionEndpoint",
    "SavedSearchCollectionEndpoint",
    "ResourceKind",
    "Entity",
    "EntityCollection",
    "ErrorKind",
    "RequestFailure",
    "SplunkError",
    "AtomEntry",
    "AtomFeed",
    "Pagination",
    "parse_feed",
    "Message",
    "MessageType",
    "Namespace",
    "ResourceName",
    "Service",
]
