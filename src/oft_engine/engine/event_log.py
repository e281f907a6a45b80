"""Event log — ordered record of notifications published by an engine."""

import logging
from typing import List, Optional, Type, TypeVar

from oft_engine.core.contracts import EventContractRegistry
from oft_engine.core.domain.events import OFTEvent


logger = logging.getLogger(__name__)

E = TypeVar("E", bound=OFTEvent)


class EventLog:
    """Append-only within a committed operation; an aborted operation
    truncates back to its mark so no notification of it survives.
    """

    def __init__(self, contracts: Optional[EventContractRegistry] = None):
        self._contracts = contracts
        self._events: List[OFTEvent] = []

    @property
    def events(self) -> List[OFTEvent]:
        return list(self._events)

    def emit(self, event: OFTEvent) -> OFTEvent:
        """
        Record ``event`` after checking it against its contract.

        Raises:
            jsonschema.ValidationError: If the event breaks its contract
        """
        if self._contracts is not None:
            self._contracts.validate(event.to_contract())
        self._events.append(event)
        logger.info("event %s %s", event.schema_name, event.model_dump_json(exclude={"oft_address"}))
        return event

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self._events if isinstance(e, event_type)]

    def mark(self) -> int:
        return len(self._events)

    def truncate(self, mark: int) -> None:
        del self._events[mark:]
