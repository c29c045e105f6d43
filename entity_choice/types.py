from __future__ import annotations

from collections.abc import Callable
from typing import Any, Optional

import click

from .choice_list import EntityChoiceList
from .exceptions import FormError, TransformationFailedError
from .fields import ChoiceField
from .transformers import EntityToIdTransformer


__all__ = (
    "EntityChoice",
    "option_from_field",
)


class EntityChoice(click.Choice):
    """
    Command line counterpart of a dropdown: accepts a choice key and
    converts it to the entity.
    """

    choice_list: EntityChoiceList
    _transformer: EntityToIdTransformer

    def __init__(
        self,
        choice_list: EntityChoiceList,
        case_sensitive: bool = True,
    ) -> None:

        # choices are not loaded until the parameter is processed
        self.choice_list = choice_list
        self.case_sensitive = case_sensitive
        self._transformer = EntityToIdTransformer(choice_list)

    @property
    # ignore: incompatible signature
    def choices(self) -> tuple[str, ...]:  # type: ignore
        return tuple(self.choice_list.choices)

    def convert(
        self,
        value: Any,
        param: Optional[click.Parameter],
        ctx: Optional[click.Context],
    ) -> Any:

        if isinstance(value, self.choice_list.entity_class):
            return value

        value = super().convert(value=value, param=param, ctx=ctx)

        try:
            return self._transformer.reverse_transform(value)
        except TransformationFailedError as e:
            self.fail(str(e), param=param, ctx=ctx)


def option_from_field(
    field: ChoiceField,
    *param_decls: str,
    **option_kwargs: Any,
) -> Callable[[click.decorators.FC], click.decorators.FC]:

    choice_list = field.choice_list

    if not isinstance(choice_list, EntityChoiceList):
        raise FormError(f"{field!r} does not select entities")

    if not param_decls:
        param_decls = (make_option_key(field.name), field.name)

    if field.is_multiple():
        option_kwargs.setdefault("multiple", True)

    option_kwargs.setdefault("required", field.is_required())
    option_kwargs.setdefault("type", EntityChoice(choice_list))
    option_kwargs.setdefault("callback", create_field_callback(field))

    return click.option(*param_decls, **option_kwargs)


def create_field_callback(
    field: ChoiceField,
) -> Callable[[click.Context, click.Parameter, Any], Any]:
    def field_callback(
        ctx: click.Context, param: click.Parameter, value: Any
    ) -> Any:

        return convert_to_field_shape(value, field)

    return field_callback


def convert_to_field_shape(value: Any, field: ChoiceField) -> Any:
    if field.is_multiple() and value is not None:
        return list(value)

    return value


def make_option_key(field_name: str) -> str:
    key = field_name.replace("_", "-").lower()
    return f"--{key}"
