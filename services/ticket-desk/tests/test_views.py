import pytest
from ticket_desk.core.views import REFRESH_PROTOCOL, Mutation, Refresh, ViewCoordinator
from ticket_desk.schemas.ticket import TicketCreate, TicketPriority, TicketStatus
from ticket_desk.schemas.views import ListQuery, Panel, SortMode


def decline(message):
    return False


@pytest.fixture
def ticket(coordinator, clock):
    created = coordinator.create_ticket(TicketCreate(title="VPN down", description="No tunnel", priority="High"))
    clock.advance()
    return created


def row_ids(coordinator):
    return [row.id for row in coordinator.list_view.rows]


def test_initial_state(store):
    store.add(store.create(title="Existing", description="x"))
    coordinator = ViewCoordinator(store)

    assert coordinator.active_panel == Panel.HOME
    assert coordinator.detail_focus is None
    assert coordinator.home.counts.open == 1
    assert len(coordinator.list_view.rows) == 1
    assert coordinator.detail.is_placeholder


def test_refresh_protocol_table():
    assert REFRESH_PROTOCOL == {
        Mutation.CREATE: (Refresh.LIST,),
        Mutation.INLINE_STATUS: (Refresh.HOME,),
        Mutation.DELETE_FROM_LIST: (Refresh.HOME, Refresh.LIST),
        Mutation.DELETE_FROM_DETAIL: (Refresh.HOME, Refresh.LIST, Refresh.DETAIL),
        Mutation.DETAIL_UPDATE: (Refresh.HOME, Refresh.LIST, Refresh.DETAIL),
        Mutation.OPEN: (Refresh.DETAIL,),
        Mutation.EXTERNAL_WRITE: (Refresh.HOME, Refresh.LIST, Refresh.DETAIL),
    }


def test_create_switches_to_list(coordinator):
    coordinator.show_panel(Panel.CREATE)

    ticket = coordinator.create_ticket(TicketCreate(title=" Printer ", description="Jammed"))

    assert coordinator.active_panel == Panel.LIST
    assert coordinator.last_refreshes == (Refresh.LIST,)
    assert row_ids(coordinator) == [ticket.id]
    assert coordinator.store.get(ticket.id).title == "Printer"


def test_create_leaves_home_for_the_next_switch(coordinator):
    coordinator.create_ticket(TicketCreate(title="Printer", description="Jammed"))
    assert coordinator.home.counts.open == 0

    coordinator.show_panel(Panel.HOME)
    assert coordinator.home.counts.open == 1


def test_blank_form_never_reaches_store(coordinator):
    with pytest.raises(ValueError):
        TicketCreate(title="   ", description="x")
    assert coordinator.store.all() == []


def test_switch_to_same_panel_is_noop(coordinator, store):
    coordinator.show_panel(Panel.LIST)
    store.add(store.create(title="Added behind the view", description="x"))

    coordinator.show_panel(Panel.LIST)
    assert coordinator.list_view.rows == []

    coordinator.show_panel(Panel.HOME)
    coordinator.show_panel(Panel.LIST)
    assert len(coordinator.list_view.rows) == 1


def test_create_panel_recomputes_nothing(coordinator, store):
    store.add(store.create(title="Added behind the view", description="x"))

    coordinator.show_panel(Panel.CREATE)

    assert coordinator.active_panel == Panel.CREATE
    assert coordinator.home.counts.open == 0


def test_inline_status_change_refreshes_home(coordinator, ticket):
    assert coordinator.change_status(ticket.id, TicketStatus.CLOSED)

    assert coordinator.last_refreshes == (Refresh.HOME,)
    assert coordinator.home.counts.closed == 1
    assert coordinator.home.counts.open == 0
    stored = coordinator.store.get(ticket.id)
    assert stored.activity_log[-1].action == "STATUS Open -> Closed"
    row = next(row for row in coordinator.list_view.rows if row.id == ticket.id)
    assert row.status == TicketStatus.CLOSED
    assert row == stored


def test_inline_status_change_on_missing_ticket(coordinator):
    assert coordinator.change_status("tkt_missing", TicketStatus.CLOSED) is False


def test_delete_focused_ticket_from_list_clears_detail(coordinator, ticket):
    coordinator.open_ticket(ticket.id)
    assert coordinator.detail_focus == ticket.id

    assert coordinator.delete_from_list(ticket.id)

    assert coordinator.detail_focus is None
    assert coordinator.detail.is_placeholder
    assert coordinator.refresh_detail().is_placeholder
    assert coordinator.last_refreshes == (Refresh.HOME, Refresh.LIST)
    assert row_ids(coordinator) == []
    assert coordinator.home.counts.open == 0


def test_delete_other_ticket_from_list_keeps_focus(coordinator, ticket):
    other = coordinator.create_ticket(TicketCreate(title="Other", description="x"))
    coordinator.open_ticket(ticket.id)

    coordinator.delete_from_list(other.id)

    assert coordinator.detail_focus == ticket.id
    assert coordinator.detail.ticket.id == ticket.id
    assert row_ids(coordinator) == [ticket.id]


def test_declined_delete_changes_nothing(coordinator, ticket, storage, store):
    coordinator.open_ticket(ticket.id)
    before = storage.get(store.key)

    assert coordinator.delete_from_list(ticket.id, confirm=decline) is False
    assert coordinator.delete_from_detail(confirm=decline) is False

    assert storage.get(store.key) == before
    assert coordinator.detail_focus == ticket.id
    assert coordinator.active_panel == Panel.DETAIL


def test_coordinator_level_confirm_gate(store):
    coordinator = ViewCoordinator(store, confirm=decline)
    created = coordinator.create_ticket(TicketCreate(title="Keep me", description="x"))

    assert coordinator.delete_from_list(created.id) is False
    assert store.get(created.id) is not None


def test_delete_from_detail(coordinator, ticket):
    coordinator.open_ticket(ticket.id)

    assert coordinator.delete_from_detail()

    assert coordinator.active_panel == Panel.LIST
    assert coordinator.detail_focus is None
    assert coordinator.detail.is_placeholder
    assert coordinator.last_refreshes == (Refresh.HOME, Refresh.LIST, Refresh.DETAIL)
    assert coordinator.store.get(ticket.id) is None
    assert row_ids(coordinator) == []


def test_delete_from_detail_without_focus(coordinator):
    assert coordinator.delete_from_detail() is False


def test_update_from_detail_refreshes_all_views(coordinator, ticket):
    coordinator.open_ticket(ticket.id)

    assert coordinator.update_from_detail(status=TicketStatus.IN_PROGRESS, priority=TicketPriority.LOW)

    assert coordinator.last_refreshes == (Refresh.HOME, Refresh.LIST, Refresh.DETAIL)
    detail = coordinator.detail.ticket
    assert detail.status == TicketStatus.IN_PROGRESS
    assert detail.priority == TicketPriority.LOW
    assert detail.updated_at > ticket.updated_at
    assert [entry.action for entry in detail.activity_log[1:]] == [
        "STATUS Open -> In Progress",
        "PRIORITY High -> Low",
    ]
    assert coordinator.home.counts.in_progress == 1
    assert coordinator.list_view.rows[0].status == TicketStatus.IN_PROGRESS


def test_update_from_detail_after_ticket_vanished(coordinator, store, ticket):
    coordinator.open_ticket(ticket.id)
    store.remove(ticket.id)

    assert coordinator.update_from_detail(status=TicketStatus.CLOSED) is False

    assert coordinator.detail.is_placeholder
    assert coordinator.detail_focus is None


def test_update_from_detail_without_focus(coordinator):
    assert coordinator.update_from_detail(status=TicketStatus.CLOSED) is False


def test_open_ticket_switches_to_detail(coordinator, ticket):
    detail = coordinator.open_ticket(ticket.id)

    assert coordinator.active_panel == Panel.DETAIL
    assert coordinator.last_refreshes == (Refresh.DETAIL,)
    assert detail.ticket.id == ticket.id


def test_open_unknown_ticket_shows_placeholder(coordinator):
    detail = coordinator.open_ticket("tkt_missing")

    assert detail.is_placeholder
    assert coordinator.detail_focus is None
    assert coordinator.active_panel == Panel.DETAIL


def test_list_query_drives_list_view(coordinator, clock):
    coordinator.create_ticket(TicketCreate(title="Low one", description="x", priority="Low"))
    clock.advance()
    coordinator.create_ticket(TicketCreate(title="High one", description="x", priority="High"))
    clock.advance()
    coordinator.create_ticket(TicketCreate(title="Medium one", description="x"))

    coordinator.set_list_query(ListQuery(sort=SortMode.PRIORITY))
    assert [row.title for row in coordinator.list_view.rows] == ["High one", "Medium one", "Low one"]

    coordinator.set_list_query(ListQuery(search="ONE", priority=TicketPriority.LOW))
    assert [row.title for row in coordinator.list_view.rows] == ["Low one"]


def test_reset(coordinator, ticket):
    coordinator.set_list_query(ListQuery(status=TicketStatus.CLOSED))
    coordinator.open_ticket(ticket.id)

    coordinator.reset()

    assert coordinator.state().active_panel == Panel.HOME
    assert coordinator.state().detail_focus is None
    assert coordinator.list_query == ListQuery()
    assert coordinator.home.counts.open == 1
    assert row_ids(coordinator) == [ticket.id]
    assert coordinator.detail.is_placeholder


def test_inline_status_change_only_swaps_the_changed_row(coordinator, ticket, store):
    other = store.create(title="Added behind the view", description="x")
    store.add(other)

    coordinator.change_status(ticket.id, TicketStatus.IN_PROGRESS)

    assert row_ids(coordinator) == [ticket.id]
    assert coordinator.list_view.rows[0].status == TicketStatus.IN_PROGRESS


def test_external_write_resyncs_all_views(coordinator, store, ticket):
    coordinator.open_ticket(ticket.id)
    added = store.create(title="Written elsewhere", description="x")
    store.add(added)
    store.remove(ticket.id)

    coordinator.external_write()

    assert coordinator.last_refreshes == (Refresh.HOME, Refresh.LIST, Refresh.DETAIL)
    assert row_ids(coordinator) == [added.id]
    assert coordinator.home.counts.open == 1
    assert coordinator.detail_focus is None
    assert coordinator.detail.is_placeholder
    assert coordinator.active_panel == Panel.DETAIL


def test_external_write_keeps_live_focus_current(coordinator, store, ticket):
    coordinator.open_ticket(ticket.id)
    store.update(ticket.id, {"title": "VPN down again"})

    coordinator.external_write()

    assert coordinator.detail_focus == ticket.id
    assert coordinator.detail.ticket.title == "VPN down again"
