"""Response validation for Riot API payloads."""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from lp_recap.exceptions import UpstreamError
from lp_recap.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class ValidationError(UpstreamError):
    """Raised when an API response does not match the expected schema."""

    def __init__(self, message: str, url: str, status_code: int = 200) -> None:
        super().__init__(status_code, message, url)


def validate_response(schema: type[T], data: Any, endpoint: str, url: str) -> T:
    """Validate API response data against a Pydantic schema.

    Args:
        schema: Pydantic model class to validate against
        data: Raw response data (dict or list)
        endpoint: API endpoint name for logging
        url: Full URL for logging

    Returns:
        Validated Pydantic model instance

    Raises:
        ValidationError: If validation fails
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        logger.error(
            "API response validation failed",
            endpoint=endpoint,
            url=url,
            error_count=e.error_count(),
            validation_errors=e.errors(include_url=False)[:5],
        )
        raise ValidationError(f"Validation failed for {endpoint}: {e}", url) from e


def validate_list(schema: type[T], data: Any, endpoint: str, url: str) -> list[T]:
    """Validate a JSON array where every element matches ``schema``.

    Raises:
        ValidationError: If the payload is not a list or an element is invalid
    """
    if not isinstance(data, list):
        logger.error(
            "API response is not a list", endpoint=endpoint, url=url, payload_type=type(data).__name__
        )
        raise ValidationError(f"Expected a list for {endpoint}", url)
    return [validate_response(schema, item, endpoint, url) for item in data]


def validate_id_list(data: Any, endpoint: str, url: str) -> list[str]:
    """Validate a plain JSON array of match id strings.

    Raises:
        ValidationError: If the payload is not a list of strings
    """
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        logger.error("API response is not a list of ids", endpoint=endpoint, url=url)
        raise ValidationError(f"Expected a list of ids for {endpoint}", url)
    return data
