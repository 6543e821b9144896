"""
JSON Schema for the record header.

The schema is generated from the ``RecordHeader`` pydantic model so the two
never drift apart; decoded headers are checked against it before a record is
built, which gives precise messages for hand-edited or damaged files.
"""
from functools import lru_cache
from typing import Any, Dict

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from flattask.logs import get_logger
from flattask.models import RecordHeader
from flattask.recovery import RecordFormatError

log = get_logger("schema")

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"


def header_schema() -> Dict[str, Any]:
    """Generate the JSON Schema describing a record header."""
    schema = RecordHeader.model_json_schema()
    schema["$schema"] = SCHEMA_DIALECT
    schema["additionalProperties"] = False
    return schema


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema = header_schema()
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_header(data: Any) -> None:
    """
    Check a decoded header against the schema.

    Raises:
        RecordFormatError: The header does not conform; the message names the
            most relevant failing location.
    """
    errors = list(_validator().iter_errors(data))
    if not errors:
        return

    first = best_match(errors)
    location = "/".join(str(p) for p in first.absolute_path) or "<header>"
    log.debug(f"Header failed validation with {len(errors)} error(s)")
    raise RecordFormatError(f"invalid record header at {location}: {first.message}")
