from typing import Any, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class SnsLink(CamelModel):
    id: str
    url: str


class DeleteMany(CamelModel):
    ids: List[str]


class DeleteManyResult(CamelModel):
    deleted_count: int
    deleted_ids: List[str]


def describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def parse_model(schema: Type[M], data: Any) -> M:
    """Validate ``data`` against ``schema``; failures become a 400 ValidationError."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(describe_errors(exc)) from exc


def input_fields(model: BaseModel) -> dict:
    """Only the fields the client actually sent, as plain Python values."""
    return model.model_dump(exclude_unset=True)


def require(model: BaseModel, *names: str) -> None:
    """Controller-side required-field check, reported with wire names."""
    missing = [to_camel(n) for n in names if getattr(model, n, None) in (None, "", [])]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
