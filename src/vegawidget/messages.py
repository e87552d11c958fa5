"""Schemas for cross-process command messages.

A command message addresses one instance and names one command:

    {"id": "chart1", "fn": "signal", "params": ["cyl", 6]}
    {"id": "chart1", "fn": "change", "params": {"name": "data1", "data": [{"x": 1}]}}
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import MalformedMessageError


class CommandMessage(BaseModel):
    """An addressed, named command sent by an external process."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1, description="Target instance identifier")
    fn: str = Field(min_length=1, description="Command name")
    params: Union[List[Any], Dict[str, Any]] = Field(
        description="Command parameters; shape depends on fn"
    )

    def positional_args(self) -> List[Any]:
        """Parameters as positional arguments (mapping values keep insertion order)."""
        if isinstance(self.params, dict):
            return list(self.params.values())
        return list(self.params)


class ChangeParams(BaseModel):
    """Parameters of the reserved ``change`` command."""

    name: str = Field(min_length=1, description="Dataset name")
    data: List[Dict[str, Any]] = Field(description="Row records replacing the dataset")


def parse_message(raw: Any) -> CommandMessage:
    """Validate an inbound message given as a mapping, JSON text or JSON bytes.

    Raises:
        MalformedMessageError: If the message is not valid JSON or misses id/fn/params
    """
    if isinstance(raw, CommandMessage):
        return raw
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            return CommandMessage.model_validate_json(raw)
        return CommandMessage.model_validate(raw)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid command message: {e}") from e


def parse_change_params(message: CommandMessage) -> ChangeParams:
    """Reshape the params of a ``change`` message into (dataset name, rows).

    Raises:
        MalformedMessageError: If params do not hold ``name`` and ``data``
    """
    try:
        return ChangeParams.model_validate(message.params)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid params for 'change': {e}") from e


def encode_message(message: CommandMessage) -> bytes:
    """Serialize a message as JSON.

    Raises:
        pydantic_core.PydanticSerializationError: If a parameter is not JSON-serializable
    """
    return message.model_dump_json().encode("utf-8")
