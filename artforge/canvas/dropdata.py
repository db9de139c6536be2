"""
Drop payloads exchanged through the platform's drag-data channel.

A payload is a JSON object carried as plain text, either
`{"type": "component", "componentType": "<type>"}` for a library item or
`{"type": "template", "templateId": "<id>"}` for a template.
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional, Union
from ..core.node import ComponentType


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentDrop:
    component_type: ComponentType


@dataclass(frozen=True)
class TemplateDrop:
    template_id: str


DropPayload = Union[ComponentDrop, TemplateDrop]


def parse_drop_payload(text: Optional[str]) -> Optional[DropPayload]:
    """
    Parses a drop payload. Anything malformed (invalid JSON, wrong shape,
    unknown component type) yields None and is otherwise ignored.
    """
    if not text:
        return None
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.debug(f"Ignoring unparsable drop payload: {e}")
        return None
    if not isinstance(data, dict):
        logger.debug(f"Ignoring drop payload of type {type(data).__name__}")
        return None

    kind = data.get("type")
    if kind == "component":
        try:
            return ComponentDrop(ComponentType(data.get("componentType")))
        except ValueError:
            logger.debug(
                f"Ignoring drop of unknown component type "
                f"{data.get('componentType')!r}"
            )
            return None
    if kind == "template":
        template_id = data.get("templateId")
        if isinstance(template_id, str) and template_id:
            return TemplateDrop(template_id)
        logger.debug("Ignoring template drop without a template id")
        return None

    logger.debug(f"Ignoring drop payload of unknown kind {kind!r}")
    return None


def make_drop_payload(drop: DropPayload) -> str:
    """Encodes a payload for a drag source, e.g. the component library."""
    if isinstance(drop, ComponentDrop):
        return json.dumps(
            {"type": "component", "componentType": drop.component_type.value}
        )
    return json.dumps({"type": "template", "templateId": drop.template_id})
