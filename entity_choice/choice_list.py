from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from functools import cached_property, reduce
from typing import Any, Optional

import sqlalchemy as sa
from .exceptions import FormError, UnexpectedTypeError
from .repository import EntityManager, EntityRepository


__all__ = (
    "ChoiceList",
    "EntityChoiceList",
    "convert_identifier",
    "resolve_query_builder",
)


logger = logging.getLogger(__name__)


class ChoiceList(ABC):
    @property
    @abstractmethod
    def choices(self) -> dict[str, str]:
        """Choice keys mapped to display labels, in display order."""

    @property
    @abstractmethod
    def preferred_keys(self) -> frozenset[str]:
        ...

    def get_preferred_choices(self) -> dict[str, str]:
        preferred = self.preferred_keys
        return {
            key: label
            for key, label in self.choices.items()
            if key in preferred
        }

    def get_other_choices(self) -> dict[str, str]:
        preferred = self.preferred_keys
        return {
            key: label
            for key, label in self.choices.items()
            if key not in preferred
        }

    def is_choice_selected(self, choice: str, display_data: Any) -> bool:
        if isinstance(display_data, Mapping):
            return bool(display_data.get(choice))

        if isinstance(display_data, (list, tuple, set, frozenset)):
            return choice in display_data

        return choice == display_data


class EntityChoiceList(ChoiceList):
    """
    Choices loaded from the entities of one mapped class.

    Nothing is fetched on construction. On first access the entities are
    taken from ``choices`` if it is not empty, otherwise from the query
    built by ``query_builder``, otherwise all entities of the class are
    loaded. The result is kept for the lifetime of the choice list.

    Choice keys are the string form of the primary key. Entities with a
    composite primary key are keyed by their position in the loaded list.
    """

    repository: EntityRepository
    entity_class: type[Any]
    display_property: Optional[str]

    def __init__(
        self,
        entity_manager: EntityManager,
        entity_class: type[Any],
        display_property: Optional[str] = None,
        query_builder: Any = None,
        choices: Iterable[Any] = (),
        preferred_choices: Iterable[Any] = (),
    ) -> None:

        self.repository = EntityRepository(entity_manager, entity_class)
        self.entity_class = entity_class
        self.display_property = display_property
        self._query_builder = query_builder
        self._choices = tuple(choices)
        self._preferred_choices = tuple(preferred_choices)

    @cached_property
    def query(self) -> Optional[sa.Select]:
        return resolve_query_builder(self._query_builder, self.repository)

    @property
    def is_loaded(self) -> bool:
        return "entities" in vars(self)

    @cached_property
    def entities(self) -> dict[str, Any]:
        if self._choices:
            source = "choices option"
            entities: Iterable[Any] = self._choices
        elif self.query is not None:
            source = "query builder"
            entities = self.repository.execute(self.query)
        else:
            source = "repository"
            entities = self.repository.find_all()

        composite = self.repository.has_composite_identifier
        result: dict[str, Any] = {}

        for position, entity in enumerate(entities):
            if composite:
                result[str(position)] = entity
            else:
                result[self._get_identifier_key(entity)] = entity

        logger.debug(
            "Loaded %d %s choices from %s",
            len(result),
            self.entity_class.__name__,
            source,
        )
        return result

    @cached_property
    def choices(self) -> dict[str, str]:
        return {
            key: self._get_label(entity)
            for key, entity in self.entities.items()
        }

    @cached_property
    def preferred_keys(self) -> frozenset[str]:
        keys: set[str] = set()

        for choice in self._preferred_choices:
            if isinstance(choice, self.entity_class):
                key = self.get_key(choice)
                if key is not None:
                    keys.add(key)
            else:
                keys.add(str(choice))

        return frozenset(keys)

    def get_key(self, entity: Any) -> Optional[str]:
        if not self.repository.has_composite_identifier:
            return self._get_identifier_key(entity)

        for key, choice in self.entities.items():
            if choice is entity:
                return key

        return None

    def get_entity(self, key: Any) -> Optional[Any]:
        key = str(key)

        if (
            not self.is_loaded
            and not self._choices
            and not self.repository.has_composite_identifier
        ):
            return self._find_entity(key)

        return self.entities.get(key)

    def _find_entity(self, key: str) -> Optional[Any]:
        column = self.repository.identifier_columns[0]
        identifier = convert_identifier(column, key)

        # only canonical keys, as the loaded choices would produce them
        if identifier is None or str(identifier) != key:
            return None

        if self.query is None:
            return self.repository.find(identifier)

        query = self.query.where(column == identifier)
        return self.repository.find_one(query)

    def _get_identifier_key(self, entity: Any) -> str:
        identifier = self.repository.get_identifier_values(entity)

        if identifier is None:
            raise FormError(
                "Entities passed to the choice field must be managed"
            )

        return str(identifier[0])

    def _get_label(self, entity: Any) -> str:
        if self.display_property is not None:
            path = self.display_property.split(".")
            return str(reduce(getattr, path, entity))

        if type(entity).__str__ is object.__str__:
            raise FormError(
                "Entities passed to the choice field must define __str__ "
                '(or you can also set the "display_property" option)'
            )

        return str(entity)


def resolve_query_builder(
    query_builder: Any,
    repository: EntityRepository,
) -> Optional[sa.Select]:

    if query_builder is None or isinstance(query_builder, sa.Select):
        return query_builder

    query = query_builder(repository)

    if not isinstance(query, sa.Select):
        raise UnexpectedTypeError(query, "Select")

    return query


def convert_identifier(column: sa.Column[Any], key: str) -> Optional[Any]:
    """
    Converts a choice key to the Python type of a primary key column.

    Returns ``None`` when the key is not a valid value for the column.
    """

    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return key

    try:
        return python_type(key)
    except (TypeError, ValueError):
        return None
