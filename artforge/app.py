import sys
import json
import logging
import argparse
import gettext
from collections import Counter
from pathlib import Path
from typing import List, Optional

# Make "_" available in all modules
gettext.install("artforge")

from .core import ops  # noqa: E402
from .core.node import ComponentNode  # noqa: E402
from .core.validation import validate  # noqa: E402


logger = logging.getLogger(__name__)


def load_components(path: Path) -> List[ComponentNode]:
    """
    Reads exported components from a JSON file. The file may hold a full
    document (`{"components": [...]}`), a list of nodes or a single node.
    """
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict) and "components" in data:
        data = data["components"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain components")
    return [ComponentNode.from_dict(item) for item in data]


def cmd_validate(args) -> int:
    nodes = load_components(args.filename)
    failed = 0
    for index, node in enumerate(nodes):
        errors = validate(node)
        if not errors:
            continue
        failed += 1
        label = node.id or f"#{index}"
        for error in errors:
            print(f"{label}: {error}")
    if failed:
        print(_("{count} of {total} component(s) failed validation").format(
            count=failed, total=len(nodes)
        ))
        return 1
    print(_("{total} component(s) OK").format(total=len(nodes)))
    return 0


def cmd_info(args) -> int:
    nodes = load_components(args.filename)
    all_nodes = [n for root in nodes for n in ops.iter_nodes(root)]
    max_depth = max((ops.depth(root) for root in nodes), default=0)
    types = Counter(getattr(n.type, "value", str(n.type)) for n in all_nodes)

    print(_("Top-level components: {count}").format(count=len(nodes)))
    print(_("Total components: {count}").format(count=len(all_nodes)))
    print(_("Max depth: {depth}").format(depth=max_depth))
    for name, count in sorted(types.items()):
        print(f"  {name}: {count}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artforge",
        description=_("Inspect exported canvas component trees."),
    )
    parser.add_argument(
        '--loglevel',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help=_('Set the logging level (default: WARNING)')
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser(
        "validate", help=_("Validate the components in a JSON file.")
    )
    p_validate.add_argument("filename", type=Path)
    p_validate.set_defaults(func=cmd_validate)

    p_info = sub.add_parser(
        "info", help=_("Print a summary of the components in a JSON file.")
    )
    p_info.add_argument("filename", type=Path)
    p_info.set_defaults(func=cmd_info)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"Running '{args.command}' on {args.filename}")

    try:
        return args.func(args)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read {args.filename}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
