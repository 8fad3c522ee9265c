from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from enum import Enum

class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"

class TicketPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

PRIORITY_RANK = {
    TicketPriority.HIGH: 3,
    TicketPriority.MEDIUM: 2,
    TicketPriority.LOW: 1,
}

DEFAULT_CATEGORY = "Other"


class ActivityEntry(BaseModel):
    timestamp: int = Field(..., description="Milliseconds since epoch.")
    action: str = Field(..., description="What happened, e.g. CREATED or STATUS.")
    actor: str = Field(..., description="Who did it.")

    model_config = ConfigDict(frozen=True)


class Ticket(BaseModel):
    """
    A persisted support ticket. Frozen: changes only go through TicketStore.update.
    Serialized with camelCase keys (createdAt, updatedAt, activityLog).
    """
    id: str
    title: str
    description: str
    category: str = DEFAULT_CATEGORY
    priority: TicketPriority = TicketPriority.MEDIUM
    status: TicketStatus = TicketStatus.OPEN
    requester: str = ""
    created_at: int = Field(..., alias="createdAt")
    updated_at: int = Field(..., alias="updatedAt")
    activity_log: List[ActivityEntry] = Field(default_factory=list, alias="activityLog")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class TicketCreate(BaseModel):
    title: str = Field(..., description="Short summary of the request.")
    description: str = Field(..., description="What is wrong or what is needed.")
    category: str = Field(DEFAULT_CATEGORY, description="Free-form category, e.g. Hardware.")
    priority: TicketPriority = Field(TicketPriority.MEDIUM, description="Ticket priority.")
    requester: str = Field("", description="Name of the person asking for help.")

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("requester")
    @classmethod
    def strip_requester(cls, value: str) -> str:
        return value.strip()


class TicketPatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[TicketPriority] = None
    status: Optional[TicketStatus] = None
    requester: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _require_text(value)
