from pydantic import BaseModel, Field, computed_field
from typing import Optional, List
from enum import Enum
from ticket_desk.schemas.ticket import Ticket, TicketPriority, TicketStatus

class Panel(str, Enum):
    HOME = "home"
    CREATE = "create"
    LIST = "list"
    DETAIL = "detail"

class SortMode(str, Enum):
    CREATED = "created"
    PRIORITY = "priority"


class ListQuery(BaseModel):
    status: Optional[TicketStatus] = Field(None, description="Exact status match, or no filter.")
    priority: Optional[TicketPriority] = Field(None, description="Exact priority match, or no filter.")
    search: str = Field("", description="Case-insensitive substring of the title.")
    sort: SortMode = Field(SortMode.CREATED, description="Newest first, or highest priority first.")


class StatusCounts(BaseModel):
    open: int = 0
    in_progress: int = 0
    closed: int = 0


class HomeView(BaseModel):
    counts: StatusCounts = Field(default_factory=StatusCounts)
    recent: List[Ticket] = []


class ListView(BaseModel):
    query: ListQuery = Field(default_factory=ListQuery)
    rows: List[Ticket] = []


class DetailView(BaseModel):
    ticket: Optional[Ticket] = None

    @computed_field
    @property
    def is_placeholder(self) -> bool:
        return self.ticket is None


class CoordinatorState(BaseModel):
    active_panel: Panel
    detail_focus: Optional[str] = None
    list_query: ListQuery


class ViewsResponse(BaseModel):
    state: CoordinatorState
    home: HomeView
    list: ListView
    detail: DetailView


class PanelSwitch(BaseModel):
    panel: Panel


class StatusChange(BaseModel):
    status: TicketStatus


class DetailUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
