import json
import pytest
from artforge.canvas.dropdata import (
    ComponentDrop,
    TemplateDrop,
    make_drop_payload,
    parse_drop_payload,
)
from artforge.core.node import ComponentType


def test_parse_component_drop():
    drop = parse_drop_payload('{"type": "component", "componentType": "button"}')
    assert drop == ComponentDrop(ComponentType.BUTTON)


def test_parse_template_drop():
    drop = parse_drop_payload('{"type": "template", "templateId": "hero-1"}')
    assert drop == TemplateDrop("hero-1")


@pytest.mark.parametrize(
    "payload",
    [
        None,
        "",
        "not json",
        "[1, 2]",
        '"button"',
        '{"type": "component", "componentType": "spaceship"}',
        '{"type": "component"}',
        '{"type": "template", "templateId": ""}',
        '{"type": "template", "templateId": 7}',
        '{"type": "widget"}',
    ],
)
def test_malformed_payloads_are_ignored(payload):
    assert parse_drop_payload(payload) is None


def test_make_drop_payload():
    text = make_drop_payload(ComponentDrop(ComponentType.CHART))
    assert json.loads(text) == {"type": "component", "componentType": "chart"}
    text = make_drop_payload(TemplateDrop("t"))
    assert parse_drop_payload(text) == TemplateDrop("t")
