import pytest
from dataclasses import replace
from artforge.core.node import (
    ComponentNode,
    ComponentType,
    Position,
    Size,
    create_node,
)
from artforge.core.validation import (
    ValidationRule,
    ValidationType,
    validate,
    validate_all,
    validate_property,
    validate_props,
)


@pytest.mark.parametrize("kind", list(ComponentType))
def test_factory_nodes_are_valid(kind):
    assert validate(create_node(kind)) == []


def test_empty_id_is_reported():
    node = replace(create_node(ComponentType.TEXT), id="")
    errors = validate(node)
    assert [e.field for e in errors] == ["id"]
    assert errors[0].type is ValidationType.REQUIRED


def test_unknown_type_is_reported():
    node = ComponentNode.from_dict(
        {
            "id": "x",
            "type": "spaceship",
            "size": {"width": 10, "height": 10},
        }
    )
    assert [e.field for e in validate(node)] == ["type"]


def test_geometry_rules():
    node = create_node(
        ComponentType.TEXT, position=Position(-1, 0), size=Size(0, 10)
    )
    fields = {e.field for e in validate(node)}
    assert fields == {"position.x", "size.width"}


def test_imported_node_without_geometry_is_invalid():
    node = ComponentNode.from_dict({"id": "x", "type": "text"})
    fields = {e.field for e in validate(node)}
    assert fields == {"size.width", "size.height"}


def test_child_errors_are_path_qualified():
    bad = replace(create_node(ComponentType.TEXT), id="")
    inner = replace(create_node(ComponentType.CONTAINER), children=(bad,))
    outer = replace(
        create_node(ComponentType.CONTAINER),
        children=(create_node(ComponentType.TEXT), inner),
    )
    errors = validate(outer)
    assert [e.field for e in errors] == ["children[1].children[0].id"]
    assert str(errors[0]) == (
        "children[1].children[0].id: Component ID is required"
    )


@pytest.mark.parametrize(
    "value, rule, ok",
    [
        ("", ValidationRule(ValidationType.REQUIRED, "req"), False),
        ("x", ValidationRule(ValidationType.REQUIRED, "req"), True),
        ("ab", ValidationRule(ValidationType.MIN_LENGTH, "min", 3), False),
        ("abcd", ValidationRule(ValidationType.MAX_LENGTH, "max", 3), False),
        (5, ValidationRule(ValidationType.MIN, "min", 10), False),
        (15, ValidationRule(ValidationType.MAX, "max", 10), False),
        (10, ValidationRule(ValidationType.MAX, "max", 10), True),
        ("abc", ValidationRule(ValidationType.PATTERN, "pat", r"^\d+$"), False),
        ("123", ValidationRule(ValidationType.PATTERN, "pat", r"^\d+$"), True),
        ("me@example.com", ValidationRule(ValidationType.EMAIL, "mail"), True),
        ("me@example", ValidationRule(ValidationType.EMAIL, "mail"), False),
        ("https://x.org/a", ValidationRule(ValidationType.URL, "url"), True),
        ("ftp://x.org", ValidationRule(ValidationType.URL, "url"), False),
    ],
)
def test_validate_property(value, rule, ok):
    result = validate_property(value, [rule])
    assert (result is None) == ok
    if not ok:
        assert result == rule.message


def test_validate_property_returns_first_failure():
    rules = [
        ValidationRule(ValidationType.MIN_LENGTH, "too short", 5),
        ValidationRule(ValidationType.EMAIL, "not an email"),
    ]
    assert validate_property("a@b", rules) == "too short"


def test_validate_props_skips_missing_values():
    rules = {
        "href": [ValidationRule(ValidationType.URL, "bad url")],
        "alt": [ValidationRule(ValidationType.REQUIRED, "alt required")],
    }
    errors = validate_props({"href": "nope", "alt": None}, rules)
    assert [(e.field, e.message) for e in errors] == [("href", "bad url")]


def test_validate_with_prop_rules():
    node = create_node(ComponentType.INPUT, props={"placeholder": "x"})
    rules = {
        "placeholder": [ValidationRule(ValidationType.MIN_LENGTH, "short", 3)]
    }
    errors = validate(node, rules)
    assert [e.field for e in errors] == ["placeholder"]


def test_validate_all_reports_only_failures(caplog):
    good = create_node(ComponentType.TEXT)
    bad = replace(create_node(ComponentType.TEXT), id="")
    report = validate_all([good, bad])
    assert list(report) == ["#1"]
    assert "validation error" in caplog.text
