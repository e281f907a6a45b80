"""
JSON Schema Contract Validators

Validates notifications against their formal JSON Schema contracts before
they are published. Uses the jsonschema library (Draft 2020-12).

Schemas (contracts/schema/):
- oft_created.json
- oft_sent.json / oft_received.json
- paused_set.json / fee_bps_set.json / fee_deposit_address_set.json
- peer_set.json / enforced_option_set.json
- rate_limit_set.json / rate_limit_unset.json
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


EVENT_SCHEMAS = (
    "oft_created",
    "oft_sent",
    "oft_received",
    "paused_set",
    "fee_bps_set",
    "fee_deposit_address_set",
    "peer_set",
    "enforced_option_set",
    "rate_limit_set",
    "rate_limit_unset",
)


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Loader for JSON Schema files.

    Schemas ship as package data next to this module.
    """

    def __init__(self):
        self._schema_dir = Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Cache of loaded schemas
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Load a JSON Schema file.

        Args:
            schema_name: Schema name without extension (e.g. 'oft_sent')

        Returns:
            Loaded schema as dict

        Raises:
            FileNotFoundError: If the schema file does not exist
            ValueError: If the file is not a valid JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation of the schema itself
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Global loader instance
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Validates data against one JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: If data does not match the schema
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)


class EventContractRegistry:
    """
    One validator per notification schema, built on first use.
    """

    def __init__(self):
        self._validators: Dict[str, ContractValidator] = {}

    def validator_for(self, schema_name: str) -> ContractValidator:
        if schema_name not in EVENT_SCHEMAS:
            raise KeyError(f"Unknown event schema: {schema_name}")
        if schema_name not in self._validators:
            self._validators[schema_name] = ContractValidator(schema_name)
        return self._validators[schema_name]

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Validate a serialized event; the schema is selected by ``event_type``.

        Raises:
            KeyError: If event_type is missing or unknown
            ValidationError: If data does not match the schema
        """
        self.validator_for(data["event_type"]).validate(data)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_event(data: Dict[str, Any]) -> None:
    """
    Validate a serialized event against its contract.

    Raises:
        ValidationError: If data does not match the schema
    """
    EventContractRegistry().validate(data)
