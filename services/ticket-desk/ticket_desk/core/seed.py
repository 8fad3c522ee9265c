from typing import List
from ticket_desk.core.store import TicketStore
from ticket_desk.schemas.ticket import Ticket, TicketPriority

def sample_tickets(store: TicketStore) -> List[Ticket]:
    return [
        store.create(
            title="Printer not printing",
            description="Error 0x09 on the second floor printer",
            category="Hardware",
            priority=TicketPriority.MEDIUM,
            requester="John",
        ),
        store.create(
            title="VPN access",
            description="Connection fails after login",
            category="Network",
            priority=TicketPriority.HIGH,
            requester="Maria",
        ),
        store.create(
            title="Update Office",
            description="Requesting the 2021 version",
            category="Software",
            priority=TicketPriority.LOW,
            requester="Carlos",
        ),
    ]

def seed_store(store: TicketStore) -> bool:
    return store.seed_if_empty(sample_tickets(store))
