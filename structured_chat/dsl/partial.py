"""Partial models for streaming.

``Partial[User]`` is a copy of ``User`` where every field is optional and
nested models are partial too, so that half-received JSON can still be
represented as a ``User``-shaped object.
"""

from __future__ import annotations

import logging
import types
from functools import lru_cache
from typing import Annotated, Any, Literal, Optional, Union, get_args, get_origin

from jiter import from_json
from pydantic import BaseModel, Field, ValidationError, create_model

logger = logging.getLogger("structured_chat.partial")


def _partial_annotation(annotation: Any) -> Any:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return partial_model(annotation)

    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is None or not args or origin in (Literal, Annotated):
        return annotation

    new_args = tuple(_partial_annotation(arg) for arg in args)
    if origin is Union or origin is types.UnionType:
        return Union[new_args]
    try:
        return origin[new_args]
    except TypeError:
        return annotation


@lru_cache(maxsize=None)
def partial_model(model: type[BaseModel]) -> type[BaseModel]:
    """Build (once per model) the all-optional twin of ``model``."""
    fields: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        fields[name] = (
            Optional[_partial_annotation(info.annotation)],
            Field(default=None, alias=info.alias, description=info.description),
        )
    return create_model(  # type: ignore[call-overload]
        f"Partial{model.__name__}",
        __module__=model.__module__,
        __doc__=model.__doc__,
        **fields,
    )


class Partial:
    """``Partial[Model]`` returns the partial twin of ``Model``."""

    def __class_getitem__(cls, model: type[BaseModel]) -> type[BaseModel]:
        return partial_model(model)


def parse_partial_json(text: str) -> Any | None:
    """Parse as much of a JSON object as has arrived so far.

    Leading prose and markdown fences are skipped. Returns ``None`` until an
    object has started.
    """
    start = text.find("{")
    if start == -1:
        return None

    candidate = text[start:]
    fence = candidate.find("```")
    if fence != -1:
        candidate = candidate[:fence]

    try:
        return from_json(candidate.rstrip().encode(), partial_mode="trailing-strings")
    except ValueError as e:
        logger.debug(f"Skipping unparseable partial payload: {e}")
        return None


def build_partial(partial_cls: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    """Instantiate a partial model without rejecting incomplete values."""
    try:
        return partial_cls.model_validate(data)
    except ValidationError:
        # Half-received values (e.g. a truncated enum string) are passed along
        # as they are.
        return partial_cls.model_construct(**data)
