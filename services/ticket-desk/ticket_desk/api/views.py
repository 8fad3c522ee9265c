from fastapi import APIRouter, Depends, HTTPException, Query, status
from ticket_desk.api.deps import get_coordinator
from ticket_desk.core.views import ViewCoordinator
from ticket_desk.schemas.ticket import TicketCreate
from ticket_desk.schemas.views import DetailUpdate, ListQuery, PanelSwitch, StatusChange, ViewsResponse

router = APIRouter(prefix="/views", tags=["Views"])

@router.get("", response_model=ViewsResponse)
def get_views(coordinator: ViewCoordinator = Depends(get_coordinator)):
    """
    Current panel, detail focus and the last computed Home, List and Detail views.
    """
    return coordinator.snapshot()


@router.post("/panel", response_model=ViewsResponse)
def switch_panel(request: PanelSwitch, coordinator: ViewCoordinator = Depends(get_coordinator)):
    coordinator.show_panel(request.panel)
    return coordinator.snapshot()


@router.put("/list/query", response_model=ViewsResponse)
def set_list_query(query: ListQuery, coordinator: ViewCoordinator = Depends(get_coordinator)):
    coordinator.set_list_query(query)
    return coordinator.snapshot()


@router.post("/tickets", response_model=ViewsResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(ticket_in: TicketCreate, coordinator: ViewCoordinator = Depends(get_coordinator)):
    """
    Submit the Create form: persists the ticket and lands on the List panel.
    """
    coordinator.create_ticket(ticket_in)
    return coordinator.snapshot()


@router.patch("/list/{ticket_id}/status", response_model=ViewsResponse)
def change_status(ticket_id: str, request: StatusChange, coordinator: ViewCoordinator = Depends(get_coordinator)):
    if not coordinator.change_status(ticket_id, request.status):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    return coordinator.snapshot()


@router.delete("/list/{ticket_id}", response_model=ViewsResponse)
def delete_from_list(
    ticket_id: str,
    confirmed: bool = Query(False, description="Nothing is deleted unless true."),
    coordinator: ViewCoordinator = Depends(get_coordinator),
):
    coordinator.delete_from_list(ticket_id, confirm=lambda message: confirmed)
    return coordinator.snapshot()


@router.post("/detail/{ticket_id}", response_model=ViewsResponse)
def open_ticket(ticket_id: str, coordinator: ViewCoordinator = Depends(get_coordinator)):
    """
    Focus the Detail panel on a ticket. An unknown id shows the empty placeholder.
    """
    coordinator.open_ticket(ticket_id)
    return coordinator.snapshot()


@router.patch("/detail", response_model=ViewsResponse)
def update_detail(request: DetailUpdate, coordinator: ViewCoordinator = Depends(get_coordinator)):
    if coordinator.detail_focus is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No ticket is open in the Detail panel")
    coordinator.update_from_detail(status=request.status, priority=request.priority)
    return coordinator.snapshot()


@router.delete("/detail", response_model=ViewsResponse)
def delete_from_detail(
    confirmed: bool = Query(False, description="Nothing is deleted unless true."),
    coordinator: ViewCoordinator = Depends(get_coordinator),
):
    if coordinator.detail_focus is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No ticket is open in the Detail panel")
    coordinator.delete_from_detail(confirm=lambda message: confirmed)
    return coordinator.snapshot()


@router.post("/reset", response_model=ViewsResponse)
def reset_views(coordinator: ViewCoordinator = Depends(get_coordinator)):
    coordinator.reset()
    return coordinator.snapshot()
