from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional

from .choice_list import ChoiceList, EntityChoiceList
from .exceptions import TransformationFailedError, UnexpectedTypeError


__all__ = (
    "ArrayToChoicesTransformer",
    "EntitiesToArrayTransformer",
    "EntityToIdTransformer",
    "ScalarToChoicesTransformer",
    "ValueTransformer",
    "ValueTransformerChain",
)


ARRAY_TYPES: tuple[type[Any], ...] = (list, tuple, set, frozenset)

SCALAR_TYPES: tuple[type[Any], ...] = (str, int)


class ValueTransformer(ABC):
    """
    Converts a field value between its model and view representations.
    """

    @abstractmethod
    def transform(self, value: Any) -> Any:
        """model -> view"""

    @abstractmethod
    def reverse_transform(self, value: Any) -> Any:
        """view -> model"""


class ValueTransformerChain(ValueTransformer):
    _transformers: tuple[ValueTransformer, ...]

    def __init__(self, transformers: Sequence[ValueTransformer]) -> None:
        self._transformers = tuple(transformers)

    @property
    def transformers(self) -> tuple[ValueTransformer, ...]:
        return self._transformers

    def transform(self, value: Any) -> Any:
        for transformer in self._transformers:
            value = transformer.transform(value)

        return value

    def reverse_transform(self, value: Any) -> Any:
        for transformer in reversed(self._transformers):
            value = transformer.reverse_transform(value)

        return value


class EntityToIdTransformer(ValueTransformer):
    choice_list: EntityChoiceList

    def __init__(self, choice_list: EntityChoiceList) -> None:
        self.choice_list = choice_list

    def transform(self, value: Any) -> str:
        if value is None or value == "":
            return ""

        if not isinstance(value, self.choice_list.entity_class):
            raise UnexpectedTypeError(
                value, self.choice_list.entity_class.__name__
            )

        key = self.choice_list.get_key(value)

        if key is None:
            raise TransformationFailedError(
                f"The entity {value!r} is not one of the choices", value
            )

        return key

    def reverse_transform(self, value: Any) -> Optional[Any]:
        if value is None or value == "":
            return None

        if not isinstance(value, SCALAR_TYPES):
            raise UnexpectedTypeError(value, "str")

        entity = self.choice_list.get_entity(value)

        if entity is None:
            raise TransformationFailedError(
                f'The entity with key "{value}" could not be found', value
            )

        return entity


class EntitiesToArrayTransformer(ValueTransformer):
    choice_list: EntityChoiceList

    def __init__(self, choice_list: EntityChoiceList) -> None:
        self.choice_list = choice_list

    def transform(self, value: Any) -> list[str]:
        if value is None:
            return []

        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise UnexpectedTypeError(value, "Collection")

        keys: list[str] = []

        for entity in value:
            if not isinstance(entity, self.choice_list.entity_class):
                raise UnexpectedTypeError(
                    entity, self.choice_list.entity_class.__name__
                )

            key = self.choice_list.get_key(entity)

            if key is None:
                raise TransformationFailedError(
                    f"The entity {entity!r} is not one of the choices", value
                )

            keys.append(key)

        return keys

    def reverse_transform(self, value: Any) -> list[Any]:
        if value is None or value == "":
            return []

        if not isinstance(value, ARRAY_TYPES):
            raise UnexpectedTypeError(value, "list")

        entities: list[Any] = []
        not_found: list[Any] = []

        for key in value:
            entity = self.choice_list.get_entity(key)

            if entity is None:
                not_found.append(key)
            else:
                entities.append(entity)

        if not_found:
            keys = '", "'.join(map(str, not_found))
            raise TransformationFailedError(
                f'The entities with keys "{keys}" could not be found',
                not_found,
            )

        return entities


class ArrayToChoicesTransformer(ValueTransformer):
    """
    Maps selected choice keys to a ``{key: selected}`` dict covering every
    choice, one entry per checkbox.
    """

    choice_list: ChoiceList

    def __init__(self, choice_list: ChoiceList) -> None:
        self.choice_list = choice_list

    def transform(self, value: Any) -> dict[str, bool]:
        if value is None:
            value = ()

        if not isinstance(value, ARRAY_TYPES):
            raise UnexpectedTypeError(value, "list")

        selected = {str(i) for i in value}
        return {key: key in selected for key in self.choice_list.choices}

    def reverse_transform(self, value: Any) -> list[str]:
        if value is None:
            return []

        if not isinstance(value, Mapping):
            raise UnexpectedTypeError(value, "dict")

        return [str(key) for key, selected in value.items() if selected]


class ScalarToChoicesTransformer(ValueTransformer):
    """
    Maps one choice key to a ``{key: selected}`` dict covering every choice,
    one entry per radio button.
    """

    choice_list: ChoiceList

    def __init__(self, choice_list: ChoiceList) -> None:
        self.choice_list = choice_list

    def transform(self, value: Any) -> dict[str, bool]:
        if value is not None and not isinstance(value, SCALAR_TYPES):
            raise UnexpectedTypeError(value, "str")

        selected = "" if value is None else str(value)
        return {key: key == selected for key in self.choice_list.choices}

    def reverse_transform(self, value: Any) -> Optional[str]:
        if value is None:
            return None

        if not isinstance(value, Mapping):
            raise UnexpectedTypeError(value, "dict")

        for key, selected in value.items():
            if selected:
                return str(key)

        return None
