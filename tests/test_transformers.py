from unittest.mock import MagicMock, call, sentinel

import pytest

from entity_choice.choice_list import EntityChoiceList
from entity_choice.exceptions import (
    TransformationFailedError,
    UnexpectedTypeError,
)
from entity_choice.transformers import (
    ArrayToChoicesTransformer,
    EntitiesToArrayTransformer,
    EntityToIdTransformer,
    ScalarToChoicesTransformer,
    ValueTransformer,
    ValueTransformerChain,
)

from . import models


@pytest.fixture
def choice_list(session):
    return EntityChoiceList(session, models.Tag)


def test_value_transformer_chain():
    first = MagicMock(spec=ValueTransformer)
    first.transform.return_value = sentinel.first_transform
    first.reverse_transform.return_value = sentinel.first_reverse

    second = MagicMock(spec=ValueTransformer)
    second.transform.return_value = sentinel.second_transform
    second.reverse_transform.return_value = sentinel.second_reverse

    chain = ValueTransformerChain([first, second])

    assert chain.transformers == (first, second)

    assert chain.transform(sentinel.model) is sentinel.second_transform
    first.transform.assert_called_once_with(sentinel.model)
    second.transform.assert_called_once_with(sentinel.first_transform)

    assert chain.reverse_transform(sentinel.view) is sentinel.first_reverse
    second.reverse_transform.assert_called_once_with(sentinel.view)
    first.reverse_transform.assert_called_once_with(sentinel.second_reverse)


def test_value_transformer_chain_order():
    calls = MagicMock()
    first = MagicMock(spec=ValueTransformer)
    second = MagicMock(spec=ValueTransformer)
    calls.attach_mock(first, "first")
    calls.attach_mock(second, "second")

    chain = ValueTransformerChain([first, second])
    chain.reverse_transform(sentinel.view)

    assert [i[0] for i in calls.mock_calls] == [
        "second.reverse_transform",
        "first.reverse_transform",
    ]


def test_entity_to_id_transform(choice_list, tags):
    transformer = EntityToIdTransformer(choice_list)

    assert transformer.transform(tags["sql"]) == "2"
    assert transformer.transform(None) == ""
    assert transformer.transform("") == ""


def test_entity_to_id_transform_unexpected_type(choice_list):
    transformer = EntityToIdTransformer(choice_list)

    with pytest.raises(UnexpectedTypeError):
        transformer.transform(models.Author(id=1))


def test_entity_to_id_reverse_transform(choice_list, tags):
    transformer = EntityToIdTransformer(choice_list)

    assert transformer.reverse_transform("3") is tags["forms"]
    assert transformer.reverse_transform(3) is tags["forms"]
    assert transformer.reverse_transform("") is None
    assert transformer.reverse_transform(None) is None


def test_entity_to_id_reverse_transform_not_found(choice_list):
    transformer = EntityToIdTransformer(choice_list)

    with pytest.raises(TransformationFailedError) as exc_info:
        transformer.reverse_transform("42")

    assert exc_info.value.args[0] == (
        'The entity with key "42" could not be found'
    )
    assert exc_info.value.value == "42"


def test_entity_to_id_reverse_transform_unexpected_type(choice_list):
    transformer = EntityToIdTransformer(choice_list)

    with pytest.raises(UnexpectedTypeError):
        transformer.reverse_transform(["1"])


def test_entity_to_id_composite_not_a_choice(session):
    choice_list = EntityChoiceList(session, models.Translation)
    transformer = EntityToIdTransformer(choice_list)

    with pytest.raises(TransformationFailedError):
        transformer.transform(models.Translation(language="de", key="x"))


def test_entities_to_array_transform(choice_list, tags):
    transformer = EntitiesToArrayTransformer(choice_list)

    assert transformer.transform(None) == []
    assert transformer.transform([]) == []
    assert transformer.transform([tags["forms"], tags["python"]]) == [
        "3",
        "1",
    ]


@pytest.mark.parametrize("value", ("1", 1, sentinel.value))
def test_entities_to_array_transform_unexpected_type(choice_list, value):
    transformer = EntitiesToArrayTransformer(choice_list)

    with pytest.raises(UnexpectedTypeError):
        transformer.transform(value)


@pytest.mark.parametrize(
    "value",
    (
        ["1", "2"],
        [sentinel.entity],
        [models.Author(name="Tolstoy")],
    ),
)
def test_entities_to_array_transform_unexpected_entity(choice_list, value):
    transformer = EntitiesToArrayTransformer(choice_list)

    with pytest.raises(UnexpectedTypeError) as exc_info:
        transformer.transform(value)

    assert '"Tag"' in exc_info.value.args[0]


def test_entities_to_array_reverse_transform(choice_list, tags):
    transformer = EntitiesToArrayTransformer(choice_list)

    assert transformer.reverse_transform(None) == []
    assert transformer.reverse_transform("") == []
    assert transformer.reverse_transform(["3", "1"]) == [
        tags["forms"],
        tags["python"],
    ]


def test_entities_to_array_reverse_transform_not_found(choice_list):
    transformer = EntitiesToArrayTransformer(choice_list)

    with pytest.raises(TransformationFailedError) as exc_info:
        transformer.reverse_transform(["1", "42", "43"])

    assert exc_info.value.args[0] == (
        'The entities with keys "42", "43" could not be found'
    )
    assert exc_info.value.value == ["42", "43"]


def test_entities_to_array_reverse_transform_unexpected_type(choice_list):
    transformer = EntitiesToArrayTransformer(choice_list)

    with pytest.raises(UnexpectedTypeError):
        transformer.reverse_transform("1")


def test_array_to_choices():
    choice_list = MagicMock()
    choice_list.choices = {"1": "python", "2": "sql", "3": "forms"}
    transformer = ArrayToChoicesTransformer(choice_list)

    assert transformer.transform(["3", "1"]) == {
        "1": True,
        "2": False,
        "3": True,
    }
    assert transformer.transform(None) == {
        "1": False,
        "2": False,
        "3": False,
    }
    assert transformer.reverse_transform(
        {"1": True, "2": False, "3": True}
    ) == ["1", "3"]
    assert transformer.reverse_transform(None) == []


def test_array_to_choices_unexpected_type():
    transformer = ArrayToChoicesTransformer(MagicMock())

    with pytest.raises(UnexpectedTypeError):
        transformer.transform("1")

    with pytest.raises(UnexpectedTypeError):
        transformer.reverse_transform(["1"])


def test_scalar_to_choices():
    choice_list = MagicMock()
    choice_list.choices = {"1": "python", "2": "sql"}
    transformer = ScalarToChoicesTransformer(choice_list)

    assert transformer.transform("2") == {"1": False, "2": True}
    assert transformer.transform(1) == {"1": True, "2": False}
    assert transformer.transform(None) == {"1": False, "2": False}
    assert transformer.transform("") == {"1": False, "2": False}

    assert transformer.reverse_transform({"1": False, "2": True}) == "2"
    assert transformer.reverse_transform({"1": False, "2": False}) is None
    assert transformer.reverse_transform(None) is None


def test_scalar_to_choices_unexpected_type():
    transformer = ScalarToChoicesTransformer(MagicMock())

    with pytest.raises(UnexpectedTypeError):
        transformer.transform(["1"])

    with pytest.raises(UnexpectedTypeError):
        transformer.reverse_transform("1")


def test_chain_calls_choice_list(choice_list, tags):
    choice_list = MagicMock(wraps=choice_list)
    choice_list.entity_class = models.Tag
    choice_list.choices = {"1": "python", "2": "sql", "3": "forms"}

    chain = ValueTransformerChain(
        [
            EntityToIdTransformer(choice_list),
            ScalarToChoicesTransformer(choice_list),
        ]
    )

    assert chain.transform(tags["sql"]) == {
        "1": False,
        "2": True,
        "3": False,
    }
    assert chain.reverse_transform({"1": True}) is tags["python"]
    assert choice_list.mock_calls == [
        call.get_key(tags["sql"]),
        call.get_entity("1"),
    ]
