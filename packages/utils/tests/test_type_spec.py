import pytest

import utilknobs_utils.type_spec as tspec
from utilknobs_common.exceptions import ConfigurationError
from utilknobs_utils.type_spec import CompositeTypeSpec, TypeSpecEntry


def test_parse_single_token():
    spec = tspec.parse_type_spec("Int")
    assert spec.entries == (TypeSpecEntry("Int"),)
    assert spec.identifier == "Int"


def test_parse_alternatives_in_order():
    spec = tspec.parse_type_spec("NullOrIntOrBool")
    assert spec.tokens == ("Null", "Int", "Bool")
    assert not any(entry.require_non_empty for entry in spec)


def test_parse_not_empty_modifier():
    spec = tspec.parse_type_spec("NotEmptyStringOrInt")
    assert len(spec) == 2
    assert spec.entries[0] == TypeSpecEntry("String", require_non_empty=True)
    assert spec.entries[1] == TypeSpecEntry("Int", require_non_empty=False)


def test_parse_strips_is_prefix():
    spec = tspec.parse_type_spec("isNotEmptyArrayOrString")
    assert spec.tokens == ("Array", "String")
    assert spec.entries[0].require_non_empty


def test_or_inside_token_is_kept():
    assert tspec.parse_type_spec("NullOrOrder").tokens == ("Null", "Order")
    assert tspec.parse_type_spec("Ordinal").tokens == ("Ordinal",)
    assert tspec.parse_type_spec("Colorful").tokens == ("Colorful",)


def test_entry_str():
    assert str(TypeSpecEntry("String", require_non_empty=True)) == "NotEmptyString"
    assert str(TypeSpecEntry("Int")) == "Int"


@pytest.mark.parametrize("identifier", ["", "   ", None, 5, "OrInt", "NotEmpty", "IntOrNotEmpty", "isOrInt"])
def test_malformed_identifiers(identifier):
    with pytest.raises(ConfigurationError):
        tspec.parse_type_spec(identifier)


def test_parse_is_memoised():
    first = tspec.parse_type_spec("NullOrFloat")
    second = tspec.parse_type_spec("NullOrFloat")
    assert first is second
    assert tspec.get_spec_cache().has("NullOrFloat")


def test_empty_spec_rejected():
    with pytest.raises(ConfigurationError):
        CompositeTypeSpec("Nothing", ())


def test_or_before_non_ascii_capital_splits():
    assert tspec.parse_type_spec("NullOrÉtat").tokens == ("Null", "État")
    assert tspec.parse_type_spec("isÉtatOrInt").tokens == ("État", "Int")
    assert tspec.parse_type_spec("NullOrétat").tokens == ("NullOrétat",)
