from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T_Model = TypeVar("T_Model", bound=BaseModel)


class CompletionMeta(BaseModel):
    """Accounting data attached to results as ``_meta``.

    Never part of validation; ``usage`` is whatever the transport reported.
    """

    usage: Any | None = None


@dataclass(frozen=True)
class ResponseModel(Generic[T_Model]):
    """A target schema and the name it is presented under to the model."""

    schema: type[T_Model]
    name: str = ""
    description: str | None = field(default=None)

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", self.schema.__name__)
        if self.description is None and self.schema.__doc__:
            object.__setattr__(self, "description", self.schema.__doc__.strip())

    @classmethod
    def from_model(
        cls, response_model: ResponseModel[T_Model] | type[T_Model]
    ) -> ResponseModel[T_Model]:
        if isinstance(response_model, ResponseModel):
            return response_model
        if isinstance(response_model, type) and issubclass(response_model, BaseModel):
            return cls(schema=response_model)
        raise TypeError(
            f"response_model must be a pydantic model or ResponseModel, "
            f"got {response_model!r}"
        )

    @property
    def json_schema(self) -> dict[str, Any]:
        return self.schema.model_json_schema()

    @property
    def openai_schema(self) -> dict[str, Any]:
        """Function definition whose parameters mirror the target schema."""
        schema = self.json_schema
        parameters = {
            k: v for k, v in schema.items() if k not in ("title", "description")
        }
        if "required" not in parameters:
            parameters["required"] = sorted(
                k
                for k, v in parameters.get("properties", {}).items()
                if "default" not in v
            )

        return {
            "name": self.name,
            "description": self.description
            or (
                f"Correctly extracted `{self.name}` with all "
                f"the required parameters with correct types"
            ),
            "parameters": parameters,
        }


def attach_meta(value: Any, usage: Any | None) -> Any:
    """Attach a ``CompletionMeta`` to ``value`` as its ``_meta`` attribute."""
    value._meta = CompletionMeta(usage=usage)
    return value
