from .__version__ import __version__  # noqa: F401 - imported but unused
from .choice_list import ChoiceList, EntityChoiceList
from .exceptions import (
    FormError,
    InvalidOptionsError,
    TransformationFailedError,
    UnexpectedTypeError,
)
from .fields import (
    ChoiceField,
    EntityChoiceField,
    configure_entity_choice_field,
    create_field,
    entity_choice_field,
)
from .repository import EntityRepository
from .types import EntityChoice, option_from_field


__all__ = (
    "ChoiceField",
    "ChoiceList",
    "EntityChoice",
    "EntityChoiceField",
    "EntityChoiceList",
    "EntityRepository",
    "FormError",
    "InvalidOptionsError",
    "TransformationFailedError",
    "UnexpectedTypeError",
    "configure_entity_choice_field",
    "create_field",
    "entity_choice_field",
    "option_from_field",
)
