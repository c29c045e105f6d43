from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import MutableSet
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .fields import ChoiceField


__all__ = (
    "CollectionMerger",
    "DataProcessor",
)


class DataProcessor(ABC):
    @abstractmethod
    def process_data(self, data: Any) -> Any:
        ...


class CollectionMerger(DataProcessor):
    """
    Merges submitted entities into the collection the field already holds.

    The existing collection object is updated in place and returned, so
    an ORM relationship keeps tracking the same collection instance.
    """

    field: ChoiceField

    def __init__(self, field: ChoiceField) -> None:
        self.field = field

    def process_data(self, data: Any) -> Any:
        collection = self.field.get_data()

        if collection is None:
            return data

        if not data:
            collection.clear()
            return collection

        submitted = list(data)

        for entity in list(collection):
            if entity not in submitted:
                collection.remove(entity)

        for entity in submitted:
            if entity in collection:
                continue

            if isinstance(collection, MutableSet):
                collection.add(entity)
            else:
                collection.append(entity)

        return collection
