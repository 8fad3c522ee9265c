import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
from ticket_desk.core.config import settings
from ticket_desk.core.listing import apply_query, summarize
from ticket_desk.core.store import TicketStore
from ticket_desk.schemas.ticket import ActivityEntry, Ticket, TicketCreate, TicketPriority, TicketStatus
from ticket_desk.schemas.views import (
    CoordinatorState,
    DetailView,
    HomeView,
    ListQuery,
    ListView,
    Panel,
    ViewsResponse,
)

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class Mutation(str, Enum):
    CREATE = "create"
    INLINE_STATUS = "inline_status"
    DELETE_FROM_LIST = "delete_from_list"
    DELETE_FROM_DETAIL = "delete_from_detail"
    DETAIL_UPDATE = "detail_update"
    OPEN = "open"
    EXTERNAL_WRITE = "external_write"


class Refresh(str, Enum):
    HOME = "home"
    LIST = "list"
    DETAIL = "detail"


REFRESH_PROTOCOL: Dict[Mutation, Tuple[Refresh, ...]] = {
    Mutation.CREATE: (Refresh.LIST,),
    Mutation.INLINE_STATUS: (Refresh.HOME,),
    Mutation.DELETE_FROM_LIST: (Refresh.HOME, Refresh.LIST),
    Mutation.DELETE_FROM_DETAIL: (Refresh.HOME, Refresh.LIST, Refresh.DETAIL),
    Mutation.DETAIL_UPDATE: (Refresh.HOME, Refresh.LIST, Refresh.DETAIL),
    Mutation.OPEN: (Refresh.DETAIL,),
    Mutation.EXTERNAL_WRITE: (Refresh.HOME, Refresh.LIST, Refresh.DETAIL),
}

PANEL_AFTER: Dict[Mutation, Panel] = {
    Mutation.CREATE: Panel.LIST,
    Mutation.DELETE_FROM_DETAIL: Panel.LIST,
    Mutation.OPEN: Panel.DETAIL,
}

PANEL_REFRESH: Dict[Panel, Refresh] = {
    Panel.HOME: Refresh.HOME,
    Panel.LIST: Refresh.LIST,
    Panel.DETAIL: Refresh.DETAIL,
}


def always_confirm(message: str) -> bool:
    return True


class ViewCoordinator:
    """
    Keeps the Home, List and Detail views consistent with the TicketStore.

    Every mutating action goes through _dispatch, which runs exactly the refreshes
    REFRESH_PROTOCOL lists for it and then switches panel per PANEL_AFTER.
    """

    def __init__(
        self,
        store: TicketStore,
        confirm: Confirm = always_confirm,
        recent_limit: int = settings.RECENT_TICKETS_LIMIT,
    ):
        self.store = store
        self.confirm = confirm
        self.recent_limit = recent_limit
        self._refreshers: Dict[Refresh, Callable[[], Any]] = {
            Refresh.HOME: self.refresh_home,
            Refresh.LIST: self.refresh_list,
            Refresh.DETAIL: self.refresh_detail,
        }
        self.reset()

    def reset(self) -> None:
        self.active_panel = Panel.HOME
        self.detail_focus: Optional[str] = None
        self.list_query = ListQuery()
        self.home = HomeView()
        self.list_view = ListView()
        self.detail = DetailView()
        self.last_refreshes: Tuple[Refresh, ...] = ()
        self.refresh_home()
        self.refresh_list()

    def state(self) -> CoordinatorState:
        return CoordinatorState(
            active_panel=self.active_panel,
            detail_focus=self.detail_focus,
            list_query=self.list_query,
        )

    def snapshot(self) -> ViewsResponse:
        return ViewsResponse(state=self.state(), home=self.home, list=self.list_view, detail=self.detail)

    # recompute triggers

    def refresh_home(self) -> HomeView:
        self.home = summarize(self.store.all(), self.recent_limit)
        return self.home

    def refresh_list(self) -> ListView:
        rows = apply_query(self.store.all(), self.list_query)
        self.list_view = ListView(query=self.list_query, rows=rows)
        return self.list_view

    def refresh_detail(self) -> DetailView:
        ticket = self.store.get(self.detail_focus) if self.detail_focus else None
        if ticket is None:
            self.clear_detail()
        else:
            self.detail = DetailView(ticket=ticket)
        return self.detail

    def _replace_row(self, ticket_id: str) -> None:
        ticket = self.store.get(ticket_id)
        if ticket is None:
            return
        rows = [ticket if row.id == ticket_id else row for row in self.list_view.rows]
        self.list_view = ListView(query=self.list_view.query, rows=rows)

    def clear_detail(self) -> None:
        self.detail_focus = None
        self.detail = DetailView()

    # panels

    def show_panel(self, panel: Panel) -> None:
        if panel == self.active_panel:
            return
        logger.debug("Panel %s -> %s", self.active_panel.value, panel.value)
        self.active_panel = panel
        refresh = PANEL_REFRESH.get(panel)
        if refresh is not None:
            self._refreshers[refresh]()

    def set_list_query(self, query: ListQuery) -> ListView:
        self.list_query = query
        return self.refresh_list()

    def _dispatch(self, mutation: Mutation) -> None:
        refreshes = REFRESH_PROTOCOL[mutation]
        for refresh in refreshes:
            self._refreshers[refresh]()
        self.last_refreshes = refreshes
        panel = PANEL_AFTER.get(mutation)
        if panel is not None:
            self.show_panel(panel)

    def _entry(self, kind: str, old: str, new: str, actor: str) -> ActivityEntry:
        return ActivityEntry(timestamp=self.store.now(), action=f"{kind} {old} -> {new}", actor=actor)

    # mutations

    def create_ticket(self, form: TicketCreate) -> Ticket:
        ticket = self.store.create(
            title=form.title,
            description=form.description,
            category=form.category,
            priority=form.priority,
            requester=form.requester,
        )
        self.store.add(ticket)
        logger.info("Created ticket %s", ticket.id)
        self._dispatch(Mutation.CREATE)
        return ticket

    def change_status(self, ticket_id: str, status: TicketStatus, actor: str = "system") -> bool:
        ticket = self.store.get(ticket_id)
        if ticket is None:
            return False
        patch = {
            "status": status,
            "activity_log": [*ticket.activity_log, self._entry("STATUS", ticket.status.value, status.value, actor)],
        }
        updated = self.store.update(ticket_id, patch)
        self._dispatch(Mutation.INLINE_STATUS)
        # the List is not recomputed, only the changed row is swapped in place
        self._replace_row(ticket_id)
        return updated

    def delete_from_list(self, ticket_id: str, confirm: Optional[Confirm] = None) -> bool:
        if not (confirm or self.confirm)("Delete this ticket permanently?"):
            return False
        self.store.remove(ticket_id)
        self._dispatch(Mutation.DELETE_FROM_LIST)
        if self.detail_focus == ticket_id:
            self.clear_detail()
        return True

    def delete_from_detail(self, confirm: Optional[Confirm] = None) -> bool:
        ticket_id = self.detail_focus
        if ticket_id is None:
            return False
        if not (confirm or self.confirm)("Delete this ticket?"):
            return False
        self.store.remove(ticket_id)
        self.detail_focus = None
        self._dispatch(Mutation.DELETE_FROM_DETAIL)
        return True

    def update_from_detail(
        self,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        actor: str = "system",
    ) -> bool:
        if self.detail_focus is None:
            return False
        ticket = self.store.get(self.detail_focus)
        updated = False
        if ticket is not None:
            patch: Dict[str, Any] = {}
            log = list(ticket.activity_log)
            if status is not None:
                patch["status"] = status
                log.append(self._entry("STATUS", ticket.status.value, status.value, actor))
            if priority is not None:
                patch["priority"] = priority
                log.append(self._entry("PRIORITY", ticket.priority.value, priority.value, actor))
            if patch:
                patch["activity_log"] = log
                updated = self.store.update(ticket.id, patch)
        self._dispatch(Mutation.DETAIL_UPDATE)
        return updated

    def open_ticket(self, ticket_id: str) -> DetailView:
        self.detail_focus = ticket_id
        self._dispatch(Mutation.OPEN)
        return self.detail

    def external_write(self) -> None:
        """
        Resync every view after the store was changed outside the panel actions,
        e.g. through the /tickets routes. A focus on a ticket that is gone is cleared.
        """
        self._dispatch(Mutation.EXTERNAL_WRITE)
