import json
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

VIEWER = "viewer"
EDITOR = "editor"
VALID_ROLES = (VIEWER, EDITOR)

# 100 years
MAX_EXPIRES_IN_HOURS = 24 * 365 * 100


def normalize_role(role: Optional[str]) -> str:
    """Anything other than viewer/editor becomes viewer."""
    return role if role in VALID_ROLES else VIEWER


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def decode_json_field(value: Any) -> Any:
    """JSON columns can come back as text; decode them, keep anything undecodable as-is."""
    if isinstance(value, str) and value:
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


# ---- Stored records ---------------------------------------------------------

class AccessLinkSummary(BaseModel):
    """Public fields of a link. Never carries the hash."""
    id: str
    resource_id: str
    role: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    utc_timestamps = field_validator("expires_at", "created_at")(_as_utc)


class AccessLink(AccessLinkSummary):
    password_hash: str
    created_by: Optional[str] = None

    @field_validator("password_hash")
    @classmethod
    def hash_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("password_hash must not be empty")
        return v

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class VerifiedLink(BaseModel):
    link_id: str
    resource_id: str
    role: Optional[str] = None
    resource_name: Optional[str] = None


class CreatedLink(BaseModel):
    link_id: str
    password: str
    expires_at: Optional[datetime] = None
    share_url: str


class Board(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Snapshot(BaseModel):
    model_config = ConfigDict(extra="allow")

    board_id: str
    data: Optional[Any] = None
    updated_at: Optional[datetime] = None

    decode_json = field_validator("data", mode="before")(decode_json_field)


class BusinessUnit(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    client_id: Optional[str] = None


class Environment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    business_unit_id: Optional[str] = None
    name: Optional[str] = None
    variables: Optional[Any] = None

    decode_json = field_validator("variables", mode="before")(decode_json_field)


class Workflow(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    business_unit_id: Optional[str] = None
    name: Optional[str] = None
    flow_data: Optional[Any] = None

    decode_json = field_validator("flow_data", mode="before")(decode_json_field)


class WorkflowEnvironment(BaseModel):
    model_config = ConfigDict(extra="allow")

    workflow_id: str
    environment_id: str
    flow_data_override: Optional[Any] = None

    decode_json = field_validator("flow_data_override", mode="before")(decode_json_field)


# ---- API bodies -------------------------------------------------------------

class CreateLinkRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role: Optional[str] = None  # board links only; "viewer" or "editor"
    expires_in: Optional[int] = Field(default=None, alias="expiresIn", le=MAX_EXPIRES_IN_HOURS)  # hours until expiration


class CreateLinkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    link_id: str = Field(alias="linkId")
    password: str  # plain text, returned once
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")
    share_url: str = Field(alias="shareUrl")


class BoardAccessLinkResponse(BaseModel):
    id: str
    board_id: str
    role: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class BusinessUnitAccessLinkResponse(BaseModel):
    id: str
    business_unit_id: str
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class VerifyRequest(BaseModel):
    password: str


class BoardVerifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    board_id: str = Field(alias="boardId")
    role: str


class BusinessUnitVerifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_unit_id: str = Field(alias="businessUnitId")
    business_unit_name: str = Field(default="", alias="businessUnitName")


class PublicBoardResponse(BaseModel):
    board: Dict[str, Any]
    role: str


class PublicBusinessUnitResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    business_unit: Dict[str, Any] = Field(alias="businessUnit")
    environments: List[Dict[str, Any]] = []
    workflows: List[Dict[str, Any]] = []
    workflow_environments: List[Dict[str, Any]] = Field(default_factory=list, alias="workflowEnvironments")
