# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Short-lived cache of revealed secrets.

Values are keyed by ``FieldKey(kind, record_id, field)`` and only survive
while the user stays on the same record: ``navigate`` to another record
drops everything.  A reveal in flight gets a ``Ticket`` for the record it
was started for; if the user has moved on by the time the answer arrives,
``put`` discards it instead of attaching it to the wrong record.
"""

from dataclasses import dataclass
from typing import Dict, Hashable, NamedTuple, Optional, Tuple


class FieldKey(NamedTuple):
    kind: str           # "server", "provider" or "settings"
    record_id: Hashable
    field: str          # wire name, e.g. "sshPassword"


@dataclass(frozen=True)
class Ticket:
    record: Tuple[str, Hashable]
    generation: int


class RevealCache:
    def __init__(self):
        self._values: Dict[FieldKey, str] = {}
        self._record: Optional[Tuple[str, Hashable]] = None
        self._generation = 0

    def navigate(self, kind: Optional[str] = None, record_id: Hashable = None) -> None:
        """Switch to another record (or to none); every cached value is dropped."""
        self._values.clear()
        self._record = (kind, record_id) if kind is not None else None
        self._generation += 1

    def clear(self) -> None:
        self.navigate()

    def ticket(self, kind: str, record_id: Hashable) -> Ticket:
        if self._record != (kind, record_id):
            self.navigate(kind, record_id)
        return Ticket((kind, record_id), self._generation)

    def is_current(self, ticket: Ticket) -> bool:
        return ticket.generation == self._generation and ticket.record == self._record

    def put(self, ticket: Ticket, field: str, value: str) -> bool:
        """Store a revealed value; returns False if the ticket is stale."""
        if not self.is_current(ticket):
            return False
        kind, record_id = ticket.record
        self._values[FieldKey(kind, record_id, field)] = value
        return True

    def get(self, kind: str, record_id: Hashable, field: str) -> Optional[str]:
        return self._values.get(FieldKey(kind, record_id, field))

    def __len__(self) -> int:
        return len(self._values)
