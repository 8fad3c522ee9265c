from typing import Iterable, List, Sequence
from ticket_desk.schemas.ticket import PRIORITY_RANK, Ticket, TicketStatus
from ticket_desk.schemas.views import HomeView, ListQuery, SortMode, StatusCounts


def filter_tickets(tickets: Iterable[Ticket], query: ListQuery) -> List[Ticket]:
    term = query.search.strip().lower()
    result = []
    for ticket in tickets:
        if query.status is not None and ticket.status != query.status:
            continue
        if query.priority is not None and ticket.priority != query.priority:
            continue
        if term and term not in ticket.title.lower():
            continue
        result.append(ticket)
    return result


def sort_tickets(tickets: Iterable[Ticket], mode: SortMode) -> List[Ticket]:
    if mode == SortMode.PRIORITY:
        return sorted(
            tickets,
            key=lambda ticket: (PRIORITY_RANK[ticket.priority], ticket.created_at),
            reverse=True,
        )
    return sorted(tickets, key=lambda ticket: ticket.created_at, reverse=True)


def apply_query(tickets: Sequence[Ticket], query: ListQuery) -> List[Ticket]:
    return sort_tickets(filter_tickets(tickets, query), query.sort)


def summarize(tickets: Sequence[Ticket], recent_limit: int = 5) -> HomeView:
    """
    Status counts over the whole collection plus the most recently created tickets.
    """
    counts = StatusCounts(
        open=sum(1 for ticket in tickets if ticket.status == TicketStatus.OPEN),
        in_progress=sum(1 for ticket in tickets if ticket.status == TicketStatus.IN_PROGRESS),
        closed=sum(1 for ticket in tickets if ticket.status == TicketStatus.CLOSED),
    )
    recent = sort_tickets(tickets, SortMode.CREATED)[:recent_limit]
    return HomeView(counts=counts, recent=recent)
