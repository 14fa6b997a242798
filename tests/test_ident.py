import pytest

from prostgen.ident import to_snake, to_upper_camel


@pytest.mark.parametrize(
    ("expected", "name"),
    [
        ("foo_bar", "FooBar"),
        ("foo_bar_baz", "FooBarBAZ"),
        ("xml_http_request", "XMLHttpRequest"),
        ("r#while", "While"),
        ("fuzz_buster", "FUZZ_BUSTER"),
        ("foo_bar_baz", "foo_bar_baz"),
        ("fuzz_buster", "FUZZ_buster"),
        ("fuzz", "_FUZZ"),
        ("fuzz", "_fuzz"),
        ("fuzz", "_Fuzz"),
        ("fuzz", "FUZZ_"),
        ("fuzz", "fuzz_"),
        ("fuzz", "Fuzz_"),
        ("fuz_z", "FuzZ_"),
        ("fieldname1", "fieldname1"),
        ("field_name2", "field_name2"),
        ("field_name3", "_field_name3"),
        ("field_name4", "field__name4_"),
        ("field0name5", "field0name5"),
        ("field_0_name6", "field_0_name6"),
        ("field_name7", "fieldName7"),
        ("field_name8", "FieldName8"),
        ("field_name9", "field_Name9"),
        ("field_name10", "Field_Name10"),
        ("field_name11", "FIELD_NAME11"),
        ("field_name12", "FIELD_name12"),
        ("field_name13", "__field_name13"),
        ("field_name14", "__Field_name14"),
        ("field_name15", "field__name15"),
        ("field_name16", "field__Name16"),
        ("field_name17", "field_name17__"),
        ("field_name18", "Field_name18__"),
    ],
)
def test_to_snake(expected, name):
    assert to_snake(name) == expected


RAW_KEYWORDS = [
    "as", "break", "const", "continue", "else", "enum", "false", "fn", "for",
    "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut", "pub",
    "ref", "return", "static", "struct", "trait", "true", "type", "unsafe",
    "use", "where", "while", "dyn", "abstract", "become", "box", "do", "final",
    "macro", "override", "priv", "typeof", "unsized", "virtual", "yield",
    "async", "await", "try",
]


@pytest.mark.parametrize("keyword", RAW_KEYWORDS)
def test_to_snake_raw_keyword(keyword):
    assert to_snake(keyword) == "r#" + keyword


@pytest.mark.parametrize(
    ("expected", "name"),
    [
        ("self_", "self"),
        ("super_", "super"),
        ("extern_", "extern"),
        ("crate_", "crate"),
    ],
)
def test_to_snake_non_raw_keyword(expected, name):
    assert to_snake(name) == expected


@pytest.mark.parametrize(
    ("expected", "name"),
    [
        ("", ""),
        ("F", "F"),
        ("Foo", "FOO"),
        ("FooBar", "FOO_BAR"),
        ("FooBar", "_FOO_BAR"),
        ("FooBar", "FOO_BAR_"),
        ("FooBar", "_FOO_BAR_"),
        ("FuzzBuster", "fuzzBuster"),
        ("FuzzBuster", "FuzzBuster"),
        ("Self_", "self"),
    ],
)
def test_to_upper_camel(expected, name):
    assert to_upper_camel(name) == expected


def test_to_snake_empty():
    assert to_snake("") == ""


def test_upper_camel_of_snake_round_trip():
    assert to_upper_camel(to_snake("XMLHttpRequest")) == "XmlHttpRequest"