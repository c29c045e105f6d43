from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional, TypeVar, Union

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from .exceptions import InvalidOptionsError
from .repository import EntityManager, EntityRepository


__all__ = (
    "ChoiceFieldOptions",
    "EntityChoiceFieldOptions",
    "QueryBuilder",
    "validate_options",
)


QueryBuilder = Union[sa.Select, Callable[[EntityRepository], sa.Select]]


class ChoiceFieldOptions(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    choices: list[Any]
    preferred_choices: list[Any] = []
    multiple: bool = False
    expanded: bool = False
    required: bool = True


class EntityChoiceFieldOptions(ChoiceFieldOptions):
    entity_manager: EntityManager
    entity_class: type[Any]
    display_property: Optional[str] = None
    query_builder: Optional[QueryBuilder] = None

    # choices are normally loaded from the database
    choices: list[Any] = []

    @field_validator("entity_class")
    @classmethod
    def check_entity_class_is_mapped(cls, value: type[Any]) -> type[Any]:
        if sa.inspect(value, raiseerr=False) is None:
            raise ValueError(f"{value.__name__} is not a mapped class")

        return value


_Options = TypeVar("_Options", bound=ChoiceFieldOptions)


def validate_options(
    model: type[_Options],
    options: Mapping[str, Any],
) -> _Options:
    try:
        return model.model_validate(dict(options))
    except ValidationError as e:
        raise build_options_error(e) from e


def build_options_error(error: ValidationError) -> InvalidOptionsError:
    missing: list[str] = []
    unknown: list[str] = []
    invalid: dict[str, str] = {}

    for item in error.errors():
        name = str(item["loc"][0])

        if item["type"] == "missing":
            missing.append(name)
        elif item["type"] == "extra_forbidden":
            unknown.append(name)
        else:
            # union members report one error each, keep the first
            invalid.setdefault(name, item["msg"])

    if missing:
        names = '", "'.join(missing)
        return InvalidOptionsError(
            f'The required options "{names}" are missing', missing
        )

    if unknown:
        names = '", "'.join(unknown)
        return InvalidOptionsError(
            f'The options "{names}" do not exist', unknown
        )

    name, message = next(iter(invalid.items()))
    return InvalidOptionsError(
        f'The option "{name}" is invalid: {message}', invalid.keys()
    )
