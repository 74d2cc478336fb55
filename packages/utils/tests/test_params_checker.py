import datetime

import pytest

import utilknobs_utils.params_checker as pc
from utilknobs_common.exceptions import ConfigurationError, TypeCheckError, ValidationError
from utilknobs_utils import reflection_utils
from utilknobs_utils.type_spec import parse_type_spec
from utilknobs_utils.type_utils import Accepted, Rejected, resolve_token


def test_check_first_alternative_wins():
    assert pc.check("p", "5", "StringOrInt") == "5"
    assert pc.check("p", "5", "IntOrString") == 5
    assert pc.check("p", "5", "FloatOrInt") == 5.0


def test_check_accepts_is_prefix():
    assert pc.check("mode", None, "isNullOrIntOrBool") is None
    assert pc.check("mode", "yes", "NullOrIntOrBool") is True


def test_check_not_empty():
    with pytest.raises(TypeCheckError):
        pc.check("p", "", "NotEmptyStringOrInt")
    assert pc.check("p", "a", "NotEmptyStringOrInt") == "a"
    assert pc.check("p", "0", "NotEmptyStringOrInt") == 0
    with pytest.raises(TypeCheckError):
        pc.check("p", [], "NotEmptyArray")
    assert pc.check("p", [1], "NotEmptyArray") == [1]


def test_check_failure_message_and_context():
    with pytest.raises(TypeCheckError) as exc_info:
        pc.check("mode", "Hello", "NullOrIntOrBool", caller="Job.run")

    error = exc_info.value
    assert str(error) == (
        "Wrong parameter value was provided to 'Job.run'. Parameter 'mode' is expected to be "
        "one of these types: null, int, bool. Value passed to 'mode': 'Hello'"
    )
    assert error.context["attempted"] == ["null", "int", "bool"]
    assert error.context["value"] == "Hello"
    assert error.context["parameter"] == "mode"
    assert error.context["caller"] == "Job.run"


def test_check_failure_lists_not_empty_alternatives():
    with pytest.raises(TypeCheckError) as exc_info:
        pc.check("p", "", "NotEmptyStringOrNull")
    assert exc_info.value.context["attempted"] == ["non empty string", "null"]


def test_check_is_a_validation_error():
    with pytest.raises(ValidationError):
        pc.check("p", object(), "Int")


def test_check_unknown_token_raised_even_when_earlier_alternative_matches():
    with pytest.raises(ConfigurationError):
        pc.check("p", 5, "IntOrUnicorn")
    with pytest.raises(ConfigurationError):
        pc.check("p", 5, "OrInt")


def test_check_with_parsed_spec():
    spec = parse_type_spec("NullOrFloat")
    assert pc.check("p", "2.5", spec) == 2.5


def test_check_class_token(person, person_class):
    reflection_utils.register_class(person_class)
    try:
        assert pc.check("owner", person, "NullOrPerson") is person
        with pytest.raises(TypeCheckError) as exc_info:
            pc.check("owner", "John", "NullOrPerson")
        assert exc_info.value.context["attempted"][1].endswith("Person")
    finally:
        reflection_utils.unregister_class("Person")


@pytest.mark.parametrize("parameter", ["", "  ", None])
def test_check_requires_parameter_name(parameter):
    with pytest.raises(ConfigurationError):
        pc.check(parameter, 1, "Int")


def test_dispatch():
    alternatives = [(resolve_token("Null"), False), (resolve_token("Int"), True)]
    assert pc.dispatch("7", alternatives) == Accepted(7)
    outcome = pc.dispatch("0", alternatives)
    assert isinstance(outcome, Rejected)
    assert outcome.value == "0"
    assert len(outcome.attempted) == 2


def test_check_type():
    assert pc.check_type("p", "12", "Int") == 12
    assert pc.check_type("p", [1], list) == [1]
    with pytest.raises(TypeCheckError) as exc_info:
        pc.check_type("p", "twelve", "Int")
    assert "is expected to be a(n) int" in str(exc_info.value)


def test_check_type_class_message():
    with pytest.raises(TypeCheckError) as exc_info:
        pc.check_type("when", "2020-01-01", datetime.date)
    assert "instance of a class 'datetime.date'" in str(exc_info.value)


def test_check_any_of():
    assert pc.check_any_of("p", "3", ["Null", "Int"]) == 3
    with pytest.raises(TypeCheckError) as exc_info:
        pc.check_any_of("p", "x", ["Null", "Int", "Bool"])
    assert "null, int or bool" in str(exc_info.value)


@pytest.mark.parametrize("tokens", [[], "Int", int])
def test_check_any_of_requires_token_list(tokens):
    with pytest.raises(ConfigurationError):
        pc.check_any_of("p", 1, tokens)


def test_not_whitespace_or_none():
    pc.not_whitespace_or_none("name", "John")
    for value in (None, "", "   ", 5):
        with pytest.raises(TypeCheckError):
            pc.not_whitespace_or_none("name", value)


def test_not_empty():
    pc.not_empty("items", [1])
    for value in (None, "", "0", 0, [], {}):
        with pytest.raises(TypeCheckError):
            pc.not_empty("items", value)


def test_class_exists():
    pc.class_exists("cls", "datetime.datetime")
    with pytest.raises(TypeCheckError):
        pc.class_exists("cls", "no.such.Thing")
    with pytest.raises(TypeCheckError):
        pc.class_exists("cls", "")


def test_is_instance_of(worker, person_class):
    pc.is_instance_of("obj", worker, person_class)
    pc.is_instance_of("when", datetime.date(2020, 1, 1), "datetime.date")
    with pytest.raises(TypeCheckError):
        pc.is_instance_of("obj", "text", person_class)
    with pytest.raises(ConfigurationError):
        pc.is_instance_of("obj", worker, "NoSuchClass")


def test_count():
    pc.count("items", [1, 2], min_count=1, max_count=3)
    pc.count("items", iter([1, 2, 3]), max_count=3)
    with pytest.raises(TypeCheckError) as exc_info:
        pc.count("items", [1, 2, 3, 4], max_count=3)
    assert "contain less than or equal to 3 items" in str(exc_info.value)
    with pytest.raises(TypeCheckError):
        pc.count("items", [], min_count=1)
    with pytest.raises(ConfigurationError):
        pc.count("items", [1])


def test_length():
    pc.length("name", "John", min_length=1, max_length=10)
    with pytest.raises(TypeCheckError) as exc_info:
        pc.length("name", "John", min_length=5, max_length=10)
    assert "have length in range from 5 to 10" in str(exc_info.value)
    assert exc_info.value.context["actual"] == 4
    with pytest.raises(TypeCheckError):
        pc.length("name", ["J"], max_length=10)


def test_value_range():
    pc.value_range("age", 30, min_value=18)
    pc.value_range("age", "30", min_value=18, max_value=65)
    pc.value_range("ratio", 0.5, min_value=0, max_value=1)
    with pytest.raises(TypeCheckError) as exc_info:
        pc.value_range("age", 70, max_value=65)
    assert "be lower than or equal to 65" in str(exc_info.value)
    with pytest.raises(TypeCheckError):
        pc.value_range("age", "old", min_value=18)
    with pytest.raises(TypeCheckError):
        pc.value_range("age", 30, min_value="eighteen")
    with pytest.raises(ConfigurationError):
        pc.value_range("age", 30)


def test_in_values():
    pc.in_values("mode", "read", ["read", "write"])
    with pytest.raises(TypeCheckError) as exc_info:
        pc.in_values("mode", "delete", ["read", "write"])
    assert "'read' and 'write'" in str(exc_info.value)
    with pytest.raises(TypeCheckError):
        pc.in_values("level", "1", [1, 2])
    with pytest.raises(TypeCheckError):
        pc.in_values("level", True, [1, 2])


def test_not_in_values():
    pc.not_in_values("mode", "delete", ["read", "write"])
    pc.not_in_values("level", "1", [1, 2])
    with pytest.raises(TypeCheckError):
        pc.not_in_values("mode", "read", ["read", "write"])


def test_check_huge_int_falls_through_alternatives():
    assert pc.check("p", 10**400, "FloatOrString") == "1" + "0" * 400
    with pytest.raises(TypeCheckError) as exc_info:
        pc.check("p", 10**5000, "FloatOrString")
    assert exc_info.value.context["attempted"] == ["float", "string"]
