"""Base model for the editor-facing JSON contract."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from multicut.models.errors import ValidationError


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python.

    Both spellings are accepted on input; output always uses the camelCase
    aliases and omits unset optional fields so a document survives
    serialize -> store -> reload unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @classmethod
    def from_payload(cls, data: Any) -> Self:
        """Validate a decoded JSON value, raising our ValidationError on failure."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise first_violation(e) from e

    @classmethod
    def from_json(cls, json_str: str | bytes) -> Self:
        try:
            return cls.model_validate_json(json_str)
        except PydanticValidationError as e:
            raise first_violation(e) from e

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def first_violation(exc: PydanticValidationError) -> ValidationError:
    """Reduce a pydantic error to the first violation it reports."""
    errors = exc.errors()
    if not errors:
        return ValidationError("Invalid config")
    err = errors[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = err.get("msg", "invalid value")
    text = f"Invalid config: {loc}: {msg}" if loc else f"Invalid config: {msg}"
    return ValidationError(
        text,
        details={"loc": loc, "message": msg, "type": err.get("type", ""), "count": len(errors)},
    )
