from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any, Optional

from wtforms import widgets
from wtforms.fields import SelectFieldBase
from wtforms.meta import DefaultMeta

from .choice_list import ChoiceList, EntityChoiceList
from .exceptions import FormError, TransformationFailedError
from .options import (
    ChoiceFieldOptions,
    EntityChoiceFieldOptions,
    validate_options,
)
from .processors import CollectionMerger, DataProcessor
from .transformers import (
    ArrayToChoicesTransformer,
    EntitiesToArrayTransformer,
    EntityToIdTransformer,
    ScalarToChoicesTransformer,
    ValueTransformer,
    ValueTransformerChain,
)


__all__ = (
    "ChoiceField",
    "EntityChoiceField",
    "configure_entity_choice_field",
    "create_field",
    "entity_choice_field",
)


logger = logging.getLogger(__name__)


class ChoiceField(SelectFieldBase):
    """
    A form field selecting one or more values from a choice list.

    The field is configured once with its options, a choice list, a value
    transformer and, optionally, a data processor. Model data is converted
    to display data with the transformer, submitted display data is
    converted back and passed through the data processor.

    Renders as a ``<select>``, or as a list of radio buttons (checkboxes
    for multiple selection) when expanded.
    """

    widget = widgets.Select()

    _options: Optional[ChoiceFieldOptions] = None
    _choice_list: Optional[ChoiceList] = None
    _value_transformer: Optional[ValueTransformer] = None
    _data_processor: Optional[DataProcessor] = None

    def __init__(
        self,
        label: Optional[str] = None,
        validators: Optional[Sequence[Any]] = None,
        **kwargs: Any,
    ) -> None:

        super().__init__(label, validators, **kwargs)
        self.data: Any = None
        self.display_data: Any = None
        self._bound = False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r}>"

    def configure(
        self,
        options: ChoiceFieldOptions,
        choice_list: ChoiceList,
        value_transformer: ValueTransformer,
        data_processor: Optional[DataProcessor] = None,
    ) -> None:

        if self.is_configured():
            raise FormError(f"Field {self.name!r} is already configured")

        self._options = options
        self._choice_list = choice_list
        self._value_transformer = value_transformer
        self._data_processor = data_processor

        self.widget, self.option_widget = select_widgets(options)
        self.flags.required = options.required

    def is_configured(self) -> bool:
        return self._value_transformer is not None

    @property
    def options(self) -> ChoiceFieldOptions:
        if self._options is None:
            raise FormError(f"Field {self.name!r} is not configured")

        return self._options

    @property
    def choice_list(self) -> ChoiceList:
        if self._choice_list is None:
            raise FormError(f"Field {self.name!r} is not configured")

        return self._choice_list

    @property
    def value_transformer(self) -> ValueTransformer:
        if self._value_transformer is None:
            raise FormError(f"Field {self.name!r} is not configured")

        return self._value_transformer

    @property
    def data_processor(self) -> Optional[DataProcessor]:
        return self._data_processor

    def is_multiple(self) -> bool:
        return self.options.multiple

    def is_expanded(self) -> bool:
        return self.options.expanded

    def is_required(self) -> bool:
        return self.options.required

    def is_bound(self) -> bool:
        return self._bound

    def set_data(self, data: Any) -> None:
        display_data = self.value_transformer.transform(data)
        self.data = data
        self.display_data = display_data

    def get_data(self) -> Any:
        return self.data

    def get_display_data(self) -> Any:
        return self.display_data

    def bind(self, display_data: Any) -> None:
        """
        Converts submitted display data back to model data.

        Raises ``TransformationFailedError`` if the submitted value does not
        resolve to a choice; the field keeps its previous data in that case.
        """

        data = self.value_transformer.reverse_transform(display_data)

        if self._data_processor is not None:
            data = self._data_processor.process_data(data)

        self.data = data
        self.display_data = display_data
        self._bound = True

    def get_choices(self) -> dict[str, str]:
        return self.choice_list.choices

    def get_preferred_choices(self) -> dict[str, str]:
        return self.choice_list.get_preferred_choices()

    def get_other_choices(self) -> dict[str, str]:
        return self.choice_list.get_other_choices()

    def is_choice_selected(self, choice: str) -> bool:
        return self.choice_list.is_choice_selected(choice, self.display_data)

    def is_blank_allowed(self) -> bool:
        return not (
            self.is_required() or self.is_multiple() or self.is_expanded()
        )

    def iter_choices(self) -> Iterator[tuple[str, str, bool, dict[str, Any]]]:
        if self.is_blank_allowed():
            yield ("", "", not self.display_data, {})

        # preferred choices first
        choices = {
            **self.get_preferred_choices(),
            **self.get_other_choices(),
        }

        for key, label in choices.items():
            yield (key, label, self.is_choice_selected(key), {})

    def process_data(self, value: Any) -> None:
        self.set_data(value)

    def process_formdata(self, valuelist: list[Any]) -> None:
        try:
            self.bind(self.get_submitted_display_data(valuelist))
        except TransformationFailedError as e:
            raise ValueError(e.args[0]) from e

    def get_submitted_display_data(self, valuelist: list[Any]) -> Any:
        """
        Shapes raw form values the way the value transformer expects them.
        """

        if self.is_expanded():
            # unknown keys stay selected and fail to resolve
            display_data = dict.fromkeys(self.get_choices(), False)
            display_data.update(dict.fromkeys(valuelist, True))
            return display_data

        if self.is_multiple():
            return list(valuelist)

        return valuelist[0] if valuelist else ""


class EntityChoiceField(ChoiceField):
    """
    A choice field of entities declared on a form class.

    Accepts the ``configure_entity_choice_field`` options next to the usual
    field arguments and is configured when the form is instantiated:

        class ArticleForm(Form):
            tags = EntityChoiceField(
                "Tags",
                entity_manager=db.session,
                entity_class=Tag,
                multiple=True,
                expanded=True,
            )
    """

    def __init__(
        self,
        label: Optional[str] = None,
        validators: Optional[Sequence[Any]] = None,
        **kwargs: Any,
    ) -> None:

        options = {
            name: kwargs.pop(name)
            for name in EntityChoiceFieldOptions.model_fields
            if name in kwargs
        }

        super().__init__(label, validators, **kwargs)
        configure_entity_choice_field(self, **options)


def select_widgets(options: ChoiceFieldOptions) -> tuple[Any, Any]:
    if not options.expanded:
        return widgets.Select(multiple=options.multiple), widgets.Option()

    if options.multiple:
        return widgets.ListWidget(prefix_label=False), widgets.CheckboxInput()

    return widgets.ListWidget(prefix_label=False), widgets.RadioInput()


def create_field(name: str, **kwargs: Any) -> ChoiceField:
    """
    Creates a choice field that does not belong to a form.
    """

    return ChoiceField(name=name, _form=None, _meta=DefaultMeta(), **kwargs)


def configure_entity_choice_field(field: ChoiceField, **options: Any) -> None:
    """
    Configures ``field`` to select entities of a mapped class.

    Args:
        field: unconfigured field
        **options:
            entity_manager:
                session used to load the entities, a ``scoped_session``
                is accepted as well, required
            entity_class: mapped class of the selectable entities, required
            display_property:
                attribute (dotted path allowed) used as choice label,
                ``str(entity)`` when not set
            query_builder:
                ``Select`` restricting the entities, or a callable
                receiving an ``EntityRepository`` and returning one
            choices: entities to use instead of querying
            preferred_choices: entities or keys displayed first
            multiple: allow selecting several entities
            expanded: render as checkboxes or radio buttons
            required: a value must be selected
    """

    options_ = validate_options(EntityChoiceFieldOptions, options)

    choice_list = EntityChoiceList(
        options_.entity_manager,
        options_.entity_class,
        options_.display_property,
        options_.query_builder,
        options_.choices,
        options_.preferred_choices,
    )

    transformers: list[ValueTransformer] = []
    data_processor: Optional[DataProcessor] = None

    if options_.multiple:
        data_processor = CollectionMerger(field)
        transformers.append(EntitiesToArrayTransformer(choice_list))

        if options_.expanded:
            transformers.append(ArrayToChoicesTransformer(choice_list))
    else:
        transformers.append(EntityToIdTransformer(choice_list))

        if options_.expanded:
            transformers.append(ScalarToChoicesTransformer(choice_list))

    value_transformer: ValueTransformer

    if len(transformers) > 1:
        value_transformer = ValueTransformerChain(transformers)
    else:
        value_transformer = transformers[0]

    field.configure(options_, choice_list, value_transformer, data_processor)

    logger.debug(
        "Configured %r for %s with %d value transformer(s)",
        field,
        options_.entity_class.__name__,
        len(transformers),
    )


def entity_choice_field(name: str, **options: Any) -> ChoiceField:
    field = create_field(name)
    configure_entity_choice_field(field, **options)
    return field
