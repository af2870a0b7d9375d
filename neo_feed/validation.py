import logging
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from .errors import SchemaError
from .schemas import RawDetail, RawFeed

logger = logging.getLogger(__name__)


def _schema_error(exc: PydanticValidationError, what: str) -> SchemaError:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or None
    logger.warning("Rejected %s payload: %s at %s", what, first["msg"], location)
    return SchemaError(f"Invalid {what} payload: {first['msg']}", location)


def validate_feed(payload: Any) -> Dict[str, List[dict]]:
    """Check a raw feed response and return its date-keyed record mapping.

    The returned mapping is the caller's own data, not a copy: validation is a
    pure check and never rewrites fields.
    """

    if not isinstance(payload, dict):
        raise SchemaError("Feed payload must be a JSON object")
    try:
        RawFeed.model_validate(payload)
    except PydanticValidationError as exc:
        raise _schema_error(exc, "feed") from exc
    return payload["near_earth_objects"]


def validate_detail(payload: Any) -> dict:
    """Check a single-object detail response, orbital data optional."""

    if not isinstance(payload, dict):
        raise SchemaError("Detail payload must be a JSON object")
    try:
        RawDetail.model_validate(payload)
    except PydanticValidationError as exc:
        raise _schema_error(exc, "detail") from exc
    return payload
