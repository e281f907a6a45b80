"""
Contract Validation Module

JSON contracts of the notifications published by the engine.
"""

from .validators import (
    EVENT_SCHEMAS,
    ContractValidator,
    EventContractRegistry,
    SchemaLoader,
    validate_event,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "EventContractRegistry",
    # Constants
    "EVENT_SCHEMAS",
    # Functions
    "validate_event",
]
