from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Response, status
from ticket_desk.api.deps import get_coordinator, get_store
from ticket_desk.core.listing import apply_query
from ticket_desk.core.seed import seed_store
from ticket_desk.core.store import TicketStore
from ticket_desk.core.views import ViewCoordinator
from ticket_desk.schemas.ticket import Ticket, TicketCreate, TicketPatch, TicketPriority, TicketStatus
from ticket_desk.schemas.views import ListQuery, SortMode

router = APIRouter(prefix="/tickets", tags=["Tickets"])

@router.post("", response_model=Ticket, status_code=status.HTTP_201_CREATED)
def create_ticket(
    ticket_in: TicketCreate,
    store: TicketStore = Depends(get_store),
    coordinator: ViewCoordinator = Depends(get_coordinator),
):
    """
    Create and persist a ticket. Title and description are validated as non-blank by TicketCreate.
    """
    ticket = store.create(
        title=ticket_in.title,
        description=ticket_in.description,
        category=ticket_in.category,
        priority=ticket_in.priority,
        requester=ticket_in.requester,
    )
    store.add(ticket)
    coordinator.external_write()
    return ticket


@router.get("", response_model=List[Ticket])
def get_tickets(
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    search: str = "",
    sort: SortMode = SortMode.CREATED,
    store: TicketStore = Depends(get_store),
):
    """
    List tickets, optionally filtered by status, priority and title text.
    """
    query = ListQuery(status=status, priority=priority, search=search, sort=sort)
    return apply_query(store.all(), query)


@router.post("/seed")
def seed_tickets(
    store: TicketStore = Depends(get_store),
    coordinator: ViewCoordinator = Depends(get_coordinator),
):
    """
    Write the sample tickets, only when no tickets are stored yet.
    """
    seeded = seed_store(store)
    if seeded:
        coordinator.external_write()
    return {"seeded": seeded}


@router.get("/{ticket_id}", response_model=Ticket)
def get_ticket(ticket_id: str, store: TicketStore = Depends(get_store)):
    ticket = store.get(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    return ticket


@router.patch("/{ticket_id}", response_model=Ticket)
def update_ticket(
    ticket_id: str,
    update_data: TicketPatch,
    store: TicketStore = Depends(get_store),
    coordinator: ViewCoordinator = Depends(get_coordinator),
):
    """
    Partially update a ticket. Only the fields sent are changed; updatedAt is always refreshed.
    """
    if not store.update(ticket_id, update_data.model_dump(exclude_unset=True, exclude_none=True)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    coordinator.external_write()
    return store.get(ticket_id)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ticket(
    ticket_id: str,
    store: TicketStore = Depends(get_store),
    coordinator: ViewCoordinator = Depends(get_coordinator),
):
    store.remove(ticket_id)
    coordinator.external_write()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
