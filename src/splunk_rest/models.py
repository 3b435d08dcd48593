"""
Pydantic models for Splunk entity content and MCP tool requests
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class AccessControl(BaseModel):
    """The ``eai:acl`` block attached to every entity"""
    model_config = ConfigDict(extra="allow")

    app: Optional[str] = None
    owner: Optional[str] = None
    sharing: Optional[str] = None
    can_write: Optional[bool] = None
    modifiable: Optional[bool] = None
    removable: Optional[bool] = None
    perms: Optional[Dict[str, Any]] = None


class EntityContent(BaseModel):
    """Base for entity content; unknown keys are kept as extra fields"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    acl: Optional[AccessControl] = Field(default=None, alias="eai:acl")
    disabled: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def empty_as_default(cls, v, info: ValidationInfo):
        # <s:key name="x"/> loads as None
        if v is None:
            field = cls.model_fields[info.field_name]
            if not field.is_required():
                return field.get_default(call_default_factory=True)
        return v


class ApplicationContent(EntityContent):
    """Application information"""
    label: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = None
    author: Optional[str] = None
    configured: bool = False
    visible: bool = True
    check_for_updates: Optional[bool] = None


class ApplicationSetupContent(EntityContent):
    """Setup form of an application"""
    setup: Optional[str] = Field(default=None, alias="eai:setup")


class ApplicationUpdateContent(EntityContent):
    """Splunkbase update details; ``update`` is absent when the application is current"""
    update: Optional[Dict[str, Any]] = None


class ApplicationArchiveContent(EntityContent):
    """An application archive produced by ``package``"""
    name: Optional[str] = None
    path: Optional[str] = None
    url: Optional[str] = None


class SavedSearchContent(EntityContent):
    """Saved search information"""
    search: str = ""
    description: Optional[str] = None
    cron_schedule: Optional[str] = None
    is_scheduled: bool = False
    next_scheduled_time: Optional[str] = None


class JobContent(EntityContent):
    """Search job status"""
    sid: Optional[str] = None
    dispatchState: Optional[str] = None
    doneProgress: float = 0.0
    eventCount: int = 0
    resultCount: int = 0
    isDone: bool = False
    isFailed: bool = False
    isPaused: bool = False
    messages: Optional[Any] = None


class IndexContent(EntityContent):
    """Index information"""
    currentDBSizeMB: float = 0.0
    maxDataSize: Optional[str] = None
    totalEventCount: int = 0
    homePath: Optional[str] = None


class ConfigurationStanzaContent(EntityContent):
    """A configuration stanza; its settings arrive as extra fields"""


class ServerInfoContent(EntityContent):
    """Server information"""
    version: Optional[str] = None
    build: Optional[str] = None
    serverName: Optional[str] = None
    host: Optional[str] = None
    product_type: Optional[str] = None
    license_state: Optional[str] = None
    mode: Optional[str] = None
    startup_time: Optional[str] = None


class SliceRequest(BaseModel):
    """Request for one page of a collection"""
    offset: int = Field(default=0, description="Index of the first entity to return", ge=0)
    count: int = Field(
        default=30,
        description="Maximum number of entities to return (0 returns all)",
        ge=0,
        le=10000
    )
    search: Optional[str] = Field(default=None, description="Filter expression applied by Splunk")


class ApplicationRequest(BaseModel):
    """Request addressing one application"""
    name: str = Field(..., description="Name of the application")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Application name cannot be empty")
        return v.strip()


class ApplicationStateRequest(ApplicationRequest):
    """Request to enable or disable an application"""
    disabled: bool = Field(..., description="True to disable the application, False to enable it")


class EntitySummary(BaseModel):
    """Entity summary returned by the MCP tools"""
    name: Optional[str]
    author: Optional[str] = None
    content: Dict[str, Any]


class SliceResponse(BaseModel):
    """One page of a collection"""
    status: str = "success"
    offset: int
    items_per_page: int
    total_results: int
    entities: List[EntitySummary]
    messages: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error response"""
    status: str = "error"
    error: str
    kind: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
