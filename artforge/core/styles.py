from typing import Dict, Tuple
from .node import ComponentNode, ComponentType


BREAKPOINTS: Tuple[str, ...] = ("base", "sm", "md", "lg")

# Minimum viewport width (px) at which each breakpoint becomes active.
BREAKPOINT_WIDTHS: Dict[str, int] = {
    "base": 0,
    "sm": 640,
    "md": 768,
    "lg": 1024,
}

DEFAULT_RESPONSIVE_STYLES: Dict[str, Dict[str, str]] = {
    "base": {
        "fontSize": "14px",
        "padding": "8px",
        "margin": "4px",
        "width": "100%",
        "display": "block",
    },
    "sm": {
        "fontSize": "16px",
        "padding": "12px",
        "margin": "8px",
        "width": "auto",
        "display": "block",
    },
    "md": {
        "fontSize": "18px",
        "padding": "16px",
        "margin": "12px",
        "width": "auto",
        "display": "flex",
    },
    "lg": {
        "fontSize": "20px",
        "padding": "20px",
        "margin": "16px",
        "width": "auto",
        "display": "flex",
    },
}

COMPONENT_RESPONSIVE_STYLES: Dict[ComponentType, Dict[str, Dict[str, str]]] = {
    ComponentType.TEXT: {
        "base": {"fontSize": "14px", "lineHeight": "1.4", "textAlign": "left"},
        "sm": {"fontSize": "16px", "lineHeight": "1.5"},
        "md": {"fontSize": "18px", "lineHeight": "1.6"},
        "lg": {"fontSize": "20px", "lineHeight": "1.7"},
    },
    ComponentType.BUTTON: {
        "base": {"fontSize": "14px", "padding": "8px 16px", "width": "100%"},
        "sm": {"fontSize": "16px", "padding": "10px 20px", "width": "auto"},
        "md": {"fontSize": "18px", "padding": "12px 24px"},
        "lg": {"fontSize": "20px", "padding": "14px 28px"},
    },
    ComponentType.INPUT: {
        "base": {"fontSize": "14px", "padding": "8px 12px", "width": "100%"},
        "sm": {"fontSize": "16px", "padding": "10px 14px", "width": "auto"},
        "md": {"fontSize": "18px", "padding": "12px 16px"},
        "lg": {"fontSize": "20px", "padding": "14px 18px"},
    },
    ComponentType.CONTAINER: {
        "base": {"padding": "8px", "margin": "4px", "width": "100%"},
        "sm": {"padding": "12px", "margin": "8px"},
        "md": {"padding": "16px", "margin": "12px"},
        "lg": {"padding": "20px", "margin": "16px"},
    },
}


def check_breakpoint(breakpoint: str) -> str:
    if breakpoint not in BREAKPOINTS:
        raise ValueError(
            f"Unknown breakpoint '{breakpoint}', expected one of {BREAKPOINTS}"
        )
    return breakpoint


def breakpoint_for_width(width: float) -> str:
    """Returns the largest breakpoint whose minimum width fits `width`."""
    active = BREAKPOINTS[0]
    for name in BREAKPOINTS:
        if width >= BREAKPOINT_WIDTHS[name]:
            active = name
    return active


def default_responsive_styles(
    component_type: ComponentType,
) -> Dict[str, Dict[str, str]]:
    """
    The starting per-breakpoint styles for a new component of the given
    type. Types without their own table use the generic defaults.
    """
    table = COMPONENT_RESPONSIVE_STYLES.get(
        component_type, DEFAULT_RESPONSIVE_STYLES
    )
    return {bp: dict(styles) for bp, styles in table.items()}


def resolve_styles(
    node: ComponentNode, breakpoint: str = "base"
) -> Dict[str, str]:
    """
    Computes the effective styles of a node at a breakpoint. The node's
    own styles come first, then each responsive layer from `base` up to
    and including `breakpoint` is applied on top (mobile first).
    """
    check_breakpoint(breakpoint)
    styles = dict(node.styles)
    layers = node.responsive_styles or {}
    for name in BREAKPOINTS[: BREAKPOINTS.index(breakpoint) + 1]:
        styles.update(layers.get(name) or {})
    return styles
