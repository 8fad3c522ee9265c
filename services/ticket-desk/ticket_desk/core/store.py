import json
import logging
import random
import string
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from pydantic import TypeAdapter, ValidationError
from ticket_desk.core.config import settings
from ticket_desk.core.storage import KeyValueStorage
from ticket_desk.schemas.ticket import (
    ActivityEntry,
    DEFAULT_CATEGORY,
    Ticket,
    TicketPriority,
    TicketStatus,
)

logger = logging.getLogger(__name__)

ID_PREFIX = "tkt"
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

_ALPHABET = string.digits + string.ascii_lowercase
_COLLECTION = TypeAdapter(List[Ticket])
# alias or field name -> field name, so patches may use either spelling
_FIELD_NAMES: Dict[str, str] = {}
for _name, _field in Ticket.model_fields.items():
    _FIELD_NAMES[_name] = _name
    if _field.alias:
        _FIELD_NAMES[_field.alias] = _name


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


class TicketIdGenerator:
    """
    tkt_<ns timestamp>_<random>, both base36. The timestamp part never repeats
    for one generator, so its ids stay unique even when the random part collides.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._last_stamp = 0

    def __call__(self) -> str:
        stamp = max(time.time_ns(), self._last_stamp + 1)
        self._last_stamp = stamp
        return f"{ID_PREFIX}_{to_base36(stamp)}_{to_base36(self._rng.getrandbits(32))}"


class TicketStore:
    """
    Sole owner of the ticket collection, kept as one JSON array under a single storage key.

    Every operation reads the full snapshot, builds a new list and writes it back.
    Reads never raise: a missing, undecodable or invalid value reads as an empty collection.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = settings.STORAGE_KEY,
        clock: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
        ids: Optional[TicketIdGenerator] = None,
    ):
        self.storage = storage
        self.key = key
        self._clock = clock or now_ms
        self._new_id = ids or TicketIdGenerator(rng)

    def _read_raw(self) -> List[Any]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored value under %s is not valid JSON; reading as empty", self.key)
            return []
        if not isinstance(data, list):
            logger.warning("Stored value under %s is not an array; reading as empty", self.key)
            return []
        return data

    def _read(self) -> List[Ticket]:
        data = self._read_raw()
        try:
            return _COLLECTION.validate_python(data)
        except ValidationError as exc:
            logger.warning(
                "Stored tickets under %s failed validation (%d errors); reading as empty",
                self.key,
                exc.error_count(),
            )
            return []

    def _write(self, tickets: Sequence[Ticket]) -> None:
        payload = [ticket.model_dump(mode="json", by_alias=True) for ticket in tickets]
        self.storage.set(self.key, json.dumps(payload))

    def now(self) -> int:
        return self._clock()

    def all(self) -> List[Ticket]:
        return self._read()

    def get(self, ticket_id: str) -> Optional[Ticket]:
        return next((ticket for ticket in self._read() if ticket.id == ticket_id), None)

    def create(
        self,
        title: str,
        description: str,
        category: str = DEFAULT_CATEGORY,
        priority: TicketPriority = TicketPriority.MEDIUM,
        requester: str = "",
        status: TicketStatus = TicketStatus.OPEN,
    ) -> Ticket:
        """
        Build a new ticket without persisting it. Blank title/description are not
        rejected here; callers validate input (see TicketCreate) before calling.
        """
        now = self.now()
        return Ticket(
            id=self._new_id(),
            title=str(title or "").strip(),
            description=str(description or "").strip(),
            category=category,
            priority=priority,
            status=status,
            requester=requester,
            created_at=now,
            updated_at=now,
            activity_log=[ActivityEntry(timestamp=now, action="CREATED", actor=requester or "system")],
        )

    def add(self, ticket: Ticket) -> None:
        self._write([*self._read(), ticket])
        logger.info("Added ticket %s", ticket.id)

    def update(self, ticket_id: str, patch: Mapping[str, Any]) -> bool:
        """
        Shallow-merge patch onto the ticket and stamp updatedAt.
        Returns False, without writing, when the id is unknown.
        """
        tickets = self._read()
        index = next((i for i, ticket in enumerate(tickets) if ticket.id == ticket_id), None)
        if index is None:
            logger.info("Update skipped, ticket %s not found", ticket_id)
            return False

        current = tickets[index]
        changes = {}
        for key, value in patch.items():
            name = _FIELD_NAMES.get(key)
            if name is None or name in IMMUTABLE_FIELDS:
                continue
            changes[name] = value

        merged = {**current.model_dump(), **changes}
        # strictly increasing even when the clock has not moved since the last write
        merged["updated_at"] = max(self.now(), current.updated_at + 1)
        updated = Ticket.model_validate(merged)

        self._write([*tickets[:index], updated, *tickets[index + 1:]])
        logger.info("Updated ticket %s fields=%s", ticket_id, sorted(changes))
        return True

    def remove(self, ticket_id: str) -> None:
        self._write([ticket for ticket in self._read() if ticket.id != ticket_id])
        logger.info("Removed ticket %s", ticket_id)

    def seed_if_empty(self, samples: Sequence[Ticket]) -> bool:
        if self._read_raw() or not samples:
            return False
        self._write(samples)
        logger.info("Seeded %d sample tickets under %s", len(samples), self.key)
        return True
