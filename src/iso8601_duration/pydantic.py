"""Pydantic integration for :py:class:`iso8601_duration.Duration`.

Registers the ISO8601 text form of a duration with pydantic's validation and
serialization machinery, so that models and settings can declare duration
fields that are read from and written to configuration files as text.
"""
from typing import Annotated, Any

from pydantic import PlainSerializer, PlainValidator, SerializationInfo, TypeAdapter, WithJsonSchema

from iso8601_duration import Duration


def _validate(value: Any) -> Duration:
    if isinstance(value, Duration):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO8601 duration string, not {type(value).__name__}")
    return Duration.fromisoformat(value)


def _serialize(value: Duration, info: SerializationInfo) -> Any:
    # python mode keeps the value so that model_dump output validates again
    return value.isoformat() if info.mode_is_json() else value


ISODuration = Annotated[
    Duration,
    PlainValidator(_validate),
    PlainSerializer(_serialize, return_type=Any),
    WithJsonSchema({"type": "string", "format": "duration"}),
]

_adapter: TypeAdapter[Duration] = TypeAdapter(ISODuration)


def duration_from_isoformat(s: str) -> Duration:
    """Convert an ISO8601 duration string to a :py:class:`Duration`.

    Args:
        s: ISO8601 duration string to parse.

    Returns:
        The parsed duration.

    Raises:
        pydantic.ValidationError: when the string is not a valid duration.

    Example:
        >>> duration_from_isoformat("P1Y2M")
        iso8601_duration.Duration(years=1, months=2)
    """
    return _adapter.validate_python(s)


def duration_to_isoformat(duration: Duration) -> str:
    """Convert a :py:class:`Duration` to its ISO8601 string.

    Example:
        >>> duration_to_isoformat(Duration(hours=5))
        'PT5H'
    """
    return _adapter.dump_python(duration, mode="json")


__all__ = [
    "ISODuration",
    "duration_from_isoformat",
    "duration_to_isoformat",
]
