from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional, Union

import sqlalchemy as sa
from sqlalchemy.orm import Session, scoped_session


__all__ = (
    "EntityManager",
    "EntityRepository",
)


# a plain session or a thread-local registry proxying one
EntityManager = Union[Session, scoped_session]


class EntityRepository:
    """
    Query access to one mapped class through a session.

    Handed to ``query_builder`` callables, which usually start from
    ``create_query_builder()`` and narrow or order the statement:

        lambda repository: (
            repository.create_query_builder()
            .where(Tag.enabled.is_(True))
            .order_by(Tag.name)
        )
    """

    session: EntityManager
    entity_class: type[Any]

    def __init__(
        self,
        session: EntityManager,
        entity_class: type[Any],
    ) -> None:

        self.session = session
        self.entity_class = entity_class
        self._mapper = sa.inspect(entity_class)

    @property
    def identifier_columns(self) -> tuple[sa.Column[Any], ...]:
        return tuple(self._mapper.primary_key)

    @property
    def identifier_names(self) -> tuple[str, ...]:
        return tuple(
            self._mapper.get_property_by_column(column).key
            for column in self.identifier_columns
        )

    @property
    def has_composite_identifier(self) -> bool:
        return len(self.identifier_columns) > 1

    def get_identifier_values(
        self,
        entity: Any,
    ) -> Optional[tuple[Any, ...]]:
        """
        Returns the primary key of a persistent entity.

        Returns ``None`` for transient and pending entities, which have no
        identity yet.
        """

        return sa.inspect(entity).identity

    def create_query_builder(self) -> sa.Select:
        return sa.select(self.entity_class)

    def execute(self, query: sa.Select) -> Sequence[Any]:
        return self.session.scalars(query).all()

    def find_all(self) -> Sequence[Any]:
        return self.execute(self.create_query_builder())

    def find(self, identifier: Any) -> Optional[Any]:
        return self.session.get(self.entity_class, identifier)

    def find_one(self, query: sa.Select) -> Optional[Any]:
        return self.session.scalars(query).one_or_none()
