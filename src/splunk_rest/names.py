"""
Resource addressing for the Splunk REST API

A resource is addressed by a namespace prefix (``services`` or
``servicesNS/{user}/{app}``) followed by a resource name made of path
segments, e.g. ``servicesNS/nobody/search/saved/searches/Errors%20today``.
"""

from functools import total_ordering
from typing import Iterable, Iterator, Optional, Tuple, Union
from urllib.parse import quote, unquote


def _escape(segment: str) -> str:
    return quote(segment, safe="")


@total_ordering
class ResourceName:
    """Immutable, ordered sequence of path segments"""

    __slots__ = ("_parts",)

    def __init__(self, *parts: Union[str, "ResourceName", Iterable[str]]):
        if len(parts) == 1 and parts[0] is None:
            raise ValueError("ResourceName requires a sequence of segments, not None")

        segments = []
        for part in parts:
            if isinstance(part, ResourceName):
                segments.extend(part._parts)
            elif isinstance(part, str):
                segments.append(part)
            elif part is None:
                raise ValueError("ResourceName segments cannot be None")
            else:
                segments.extend(part)

        for segment in segments:
            if segment is None:
                raise ValueError("ResourceName segments cannot be None")
            if not isinstance(segment, str):
                raise TypeError(f"ResourceName segment must be str, not {type(segment).__name__}")
            if not segment:
                raise ValueError("ResourceName segments cannot be empty")

        self._parts: Tuple[str, ...] = tuple(segments)

    @classmethod
    def from_path(cls, path: str) -> "ResourceName":
        """Build a ResourceName from an escaped path, the inverse of str()"""
        path = path.strip("/")
        if not path:
            return cls()
        return cls([unquote(segment) for segment in path.split("/")])

    @property
    def title(self) -> str:
        """Last segment, the name of the resource within its collection"""
        return self._parts[-1]

    @property
    def collection(self) -> str:
        """Second to last segment"""
        return self._parts[-2]

    @property
    def parent(self) -> "ResourceName":
        return ResourceName(self._parts[:-1])

    @property
    def parts(self) -> Tuple[str, ...]:
        return self._parts

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ResourceName(self._parts[index])
        return self._parts[index]

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[str]:
        return iter(self._parts)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ResourceName):
            return NotImplemented
        return self._parts == other._parts

    def __lt__(self, other) -> bool:
        if not isinstance(other, ResourceName):
            return NotImplemented
        return self._parts < other._parts

    def __hash__(self) -> int:
        return hash(self._parts)

    def __str__(self) -> str:
        return "/".join(_escape(segment) for segment in self._parts)

    def __repr__(self) -> str:
        return f"ResourceName({', '.join(repr(p) for p in self._parts)})"


WILDCARD = "-"


def _normalize(value: Optional[str]) -> str:
    if value is None or value in ("*", WILDCARD):
        return WILDCARD
    if not isinstance(value, str) or not value:
        raise ValueError(f"Invalid namespace component: {value!r}")
    return value


class Namespace:
    """
    The (user, app) scope under which resource names are addressed.

    ``Namespace.DEFAULT`` addresses the ``services`` root, which resolves
    to the authenticated user's default app. Any other namespace renders
    as ``servicesNS/{user}/{app}``; ``None``, ``*`` and ``-`` all mean
    "all users" or "all apps".
    """

    __slots__ = ("_user", "_app", "_default")

    def __init__(self, user: Optional[str] = None, app: Optional[str] = None, *, default: bool = False):
        self._default = default
        self._user = None if default else _normalize(user)
        self._app = None if default else _normalize(app)

    @property
    def user(self) -> Optional[str]:
        return self._user

    @property
    def app(self) -> Optional[str]:
        return self._app

    @property
    def is_default(self) -> bool:
        return self._default

    @property
    def is_wildcard(self) -> bool:
        return not self._default and WILDCARD in (self._user, self._app)

    @classmethod
    def parse_path(cls, path: str) -> Tuple["Namespace", ResourceName]:
        """Split a server-relative path into its namespace and resource name"""
        segments = path.strip("/").split("/")
        if segments[0] == "services":
            return cls.DEFAULT, ResourceName.from_path("/".join(segments[1:]))
        if segments[0] == "servicesNS" and len(segments) >= 3:
            namespace = cls(unquote(segments[1]), unquote(segments[2]))
            return namespace, ResourceName.from_path("/".join(segments[3:]))
        raise ValueError(f"Not a Splunk services path: {path!r}")

    def __str__(self) -> str:
        if self._default:
            return "services"
        return f"servicesNS/{_escape(self._user)}/{_escape(self._app)}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Namespace):
            return NotImplemented
        return (self._default, self._user, self._app) == (other._default, other._user, other._app)

    def __hash__(self) -> int:
        return hash((self._default, self._user, self._app))

    def __repr__(self) -> str:
        if self._default:
            return "Namespace.DEFAULT"
        return f"Namespace(user={self._user!r}, app={self._app!r})"


Namespace.DEFAULT = Namespace(default=True)


# Well-known resource names
APPS_LOCAL = ResourceName("apps", "local")
CAPABILITIES = ResourceName("authorization", "capabilities")
CONFIGS = ResourceName("configs")
PROPERTIES = ResourceName("properties")
EXPORT = ResourceName("search", "jobs", "export")
INDEXES = ResourceName("data", "indexes")
INPUTS = ResourceName("data", "inputs")
JOBS = ResourceName("search", "jobs")
LOGIN = ResourceName("auth", "login")
LOGGER = ResourceName("server", "logger")
MESSAGES = ResourceName("messages")
ROLES = ResourceName("authorization", "roles")
SAVED_SEARCHES = ResourceName("saved", "searches")
SERVER_INFO = ResourceName("server", "info")
SERVER_SETTINGS = ResourceName("server", "settings")
USERS = ResourceName("authentication", "users")
