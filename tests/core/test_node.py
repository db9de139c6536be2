import pytest
from dataclasses import replace
from datetime import datetime
from artforge.core.node import (
    ComponentNode,
    ComponentType,
    Metadata,
    Position,
    Size,
    coerce_type,
    create_default_metadata,
    create_node,
    generate_id,
)


def test_create_node_defaults():
    node = create_node(ComponentType.BUTTON)
    assert node.id.startswith("component_")
    assert node.type is ComponentType.BUTTON
    assert node.position == Position(0, 0)
    assert node.size == Size(100, 50)
    assert node.rotation == 0
    assert node.skew.x == 0 and node.skew.y == 0
    assert node.children == ()
    assert node.props == {}
    assert node.styles == {}
    assert node.responsive_styles is None
    assert node.metadata.version == "1.0.0"
    assert node.metadata.author == "system"
    assert node.metadata.created == node.metadata.modified


def test_create_node_accepts_type_string():
    node = create_node("text", position=Position(5, 6))
    assert node.type is ComponentType.TEXT
    assert node.rect == (5, 6, 100, 50)


def test_create_node_rejects_unknown_type():
    with pytest.raises(ValueError):
        create_node("spaceship")


def test_create_node_copies_props():
    props = {"children": "Click"}
    node = create_node(ComponentType.BUTTON, props=props)
    props["children"] = "Changed"
    assert node.props["children"] == "Click"


def test_generate_id_is_unique():
    ids = {generate_id() for _ in range(500)}
    assert len(ids) == 500


def test_position_arithmetic():
    assert Position(1, 2) + Position(3, 4) == Position(4, 6)
    assert Position(5, 5) - Position(2, 3) == Position(3, 2)


def test_metadata_touched_only_changes_modified():
    meta = Metadata(created=datetime(2024, 1, 1), modified=datetime(2024, 1, 1))
    touched = meta.touched()
    assert touched.created == meta.created
    assert touched.modified > meta.modified


def test_metadata_from_dict_parses_timestamps():
    meta = Metadata.from_dict(
        {
            "created": "2024-05-01T12:00:00Z",
            "modified": 1714564800000,
            "tags": ["a", "b"],
            "locked": True,
        }
    )
    assert meta.created.year == 2024
    assert isinstance(meta.modified, datetime)
    assert meta.tags == ("a", "b")
    assert meta.locked is True
    assert meta.author == "system"


def test_metadata_from_empty_dict_is_default():
    meta = Metadata.from_dict(None)
    assert meta.version == "1.0.0"
    assert create_default_metadata().hidden is False


def test_coerce_type_passes_unknown_through():
    assert coerce_type("image") is ComponentType.IMAGE
    assert coerce_type(ComponentType.CHART) is ComponentType.CHART
    assert coerce_type("spaceship") == "spaceship"
    assert coerce_type(None) is None


def test_to_dict_shape():
    child = create_node(ComponentType.TEXT, id="child")
    node = ComponentNode(
        id="root",
        type=ComponentType.CONTAINER,
        props={"className": "box"},
        children=(child,),
        responsive_styles={"md": {"padding": "2rem"}},
    )
    data = node.to_dict()
    assert data["id"] == "root"
    assert data["type"] == "container"
    assert data["position"] == {"x": 0.0, "y": 0.0}
    assert data["size"] == {"width": 100.0, "height": 50.0}
    assert data["skew"] == {"x": 0.0, "y": 0.0}
    assert data["children"][0]["id"] == "child"
    assert data["responsiveStyles"] == {"md": {"padding": "2rem"}}
    assert "responsiveStyles" not in child.to_dict()


def test_from_dict_round_trip_keeps_tree():
    node = create_node(
        ComponentType.CONTAINER,
        position=Position(10, 20),
        size=Size(300, 200),
    )
    node = replace(node, children=(create_node(ComponentType.BUTTON),))
    restored = ComponentNode.from_dict(node.to_dict())
    assert restored.id == node.id
    assert restored.rect == node.rect
    assert restored.children[0].id == node.children[0].id
    assert restored.children[0].type is ComponentType.BUTTON


def test_from_dict_defaults_missing_geometry_to_zero():
    node = ComponentNode.from_dict({"id": "x", "type": "text"})
    assert node.position == Position(0, 0)
    assert node.size == Size(0, 0)
    assert node.children == ()


@pytest.mark.parametrize("raw, expected", [
    (400, 40),
    (-30, 330),
    (360, 0),
    (None, 0),
])
def test_from_dict_wraps_rotation(raw, expected):
    node = ComponentNode.from_dict({"id": "x", "type": "text",
                                    "rotation": raw})
    assert node.rotation == pytest.approx(expected)
