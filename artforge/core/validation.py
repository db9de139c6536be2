from __future__ import annotations
import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence
from .node import ComponentNode, ComponentType


logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[\w.-]+@[\w.-]+\.[a-zA-Z]{2,6}$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$")


class ValidationType(str, Enum):
    REQUIRED = "required"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    EMAIL = "email"
    URL = "url"


@dataclass(frozen=True)
class ValidationRule:
    type: ValidationType
    message: str
    value: Any = None


@dataclass(frozen=True)
class ValidationError:
    """A non-fatal problem found in a node, qualified by its field path."""

    field: str
    message: str
    type: ValidationType
    value: Any = None

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_property(
    value: Any, rules: Sequence[ValidationRule]
) -> Optional[str]:
    """
    Checks a single property value against a list of rules and returns the
    message of the first rule that fails, or None if all pass.
    """
    for rule in rules:
        kind = rule.type
        if kind == ValidationType.REQUIRED:
            if value is None or value == "":
                return rule.message
        elif kind == ValidationType.MIN_LENGTH:
            if isinstance(value, str) and len(value) < rule.value:
                return rule.message
        elif kind == ValidationType.MAX_LENGTH:
            if isinstance(value, str) and len(value) > rule.value:
                return rule.message
        elif kind == ValidationType.MIN:
            if _is_number(value) and value < rule.value:
                return rule.message
        elif kind == ValidationType.MAX:
            if _is_number(value) and value > rule.value:
                return rule.message
        elif kind == ValidationType.PATTERN:
            if isinstance(value, str) and not re.search(rule.value, value):
                return rule.message
        elif kind == ValidationType.EMAIL:
            if isinstance(value, str) and not _EMAIL_RE.match(value):
                return rule.message
        elif kind == ValidationType.URL:
            if isinstance(value, str) and not _URL_RE.match(value):
                return rule.message
    return None


def validate_props(
    props: Mapping[str, Any],
    rules: Mapping[str, Sequence[ValidationRule]],
) -> List[ValidationError]:
    errors: List[ValidationError] = []
    for key, value in props.items():
        if value is None:
            continue
        for rule in rules.get(key, ()):
            message = validate_property(value, [rule])
            if message:
                errors.append(ValidationError(key, message, rule.type, value))
    return errors


def validate(
    node: ComponentNode,
    rules: Optional[Mapping[str, Sequence[ValidationRule]]] = None,
) -> List[ValidationError]:
    """
    Collects every problem in a node and its subtree. Nothing is raised;
    callers decide whether an error blocks an operation or is only shown
    as a warning.

    Errors found in descendants have their field prefixed with
    `children[i].` for each level of nesting.

    Args:
        node: The root of the subtree to check.
        rules: Optional per-prop validation rules, keyed by prop name.
    """
    errors = validate_props(node.props, rules or {})

    if not node.id:
        errors.append(
            ValidationError(
                "id", "Component ID is required",
                ValidationType.REQUIRED, node.id,
            )
        )
    if not isinstance(node.type, ComponentType):
        errors.append(
            ValidationError(
                "type", "Component type is required",
                ValidationType.REQUIRED, node.type,
            )
        )

    x, y = node.position.x, node.position.y
    if not _is_number(x) or x < 0:
        errors.append(
            ValidationError(
                "position.x", "Position X must be a non-negative number",
                ValidationType.MIN, x,
            )
        )
    if not _is_number(y) or y < 0:
        errors.append(
            ValidationError(
                "position.y", "Position Y must be a non-negative number",
                ValidationType.MIN, y,
            )
        )

    width, height = node.size.width, node.size.height
    if not _is_number(width) or width <= 0:
        errors.append(
            ValidationError(
                "size.width", "Width must be a positive number",
                ValidationType.MIN, width,
            )
        )
    if not _is_number(height) or height <= 0:
        errors.append(
            ValidationError(
                "size.height", "Height must be a positive number",
                ValidationType.MIN, height,
            )
        )

    for index, child in enumerate(node.children):
        for error in validate(child, rules):
            errors.append(
                replace(error, field=f"children[{index}].{error.field}")
            )

    return errors


def validate_all(
    nodes: Sequence[ComponentNode],
    rules: Optional[Mapping[str, Sequence[ValidationRule]]] = None,
) -> Dict[str, List[ValidationError]]:
    """
    Validates a list of top-level nodes, as handed back by an external
    generator. Only nodes with errors appear in the result, keyed by id.
    """
    report: Dict[str, List[ValidationError]] = {}
    for index, node in enumerate(nodes):
        errors = validate(node, rules)
        if errors:
            key = node.id or f"#{index}"
            logger.warning(
                f"Component {key} has {len(errors)} validation error(s)"
            )
            report[key] = errors
    return report
