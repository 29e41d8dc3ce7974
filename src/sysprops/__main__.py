"""Entry point: python -m sysprops [apply|wiki|flavor]

- No args / "apply": apply system properties on the main wiki
- "wiki ID...":      apply on the given wikis, as if they just became ready
- "flavor EXT ...":  apply on the wikis whose active flavor was just installed
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sysprops.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sysprops", description="Apply system properties to wiki documents.")
    parser.add_argument("--config", type=Path, default=None, help="path to sysprops.toml")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("apply", help="apply on the main wiki (default)")

    wiki = sub.add_parser("wiki", help="apply on the given wikis")
    wiki.add_argument("wiki_ids", nargs="+", metavar="ID")

    flavor = sub.add_parser("flavor", help="apply after a flavor install or upgrade")
    flavor.add_argument("extension", help="extension id, optionally id@version")
    flavor.add_argument("--wiki", dest="wikis", action="append", required=True, metavar="ID")
    flavor.add_argument("--upgrade", action="store_true", help="treat as an upgrade instead of an install")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = load_config(args.config)
    _setup_logging(config.log_level)

    from sysprops.app import SyspropsApp
    from sysprops.listener import (
        ApplicationReadyEvent,
        ExtensionId,
        ExtensionInstalledEvent,
        ExtensionUpgradedEvent,
        InstalledExtension,
        WikiReadyEvent,
    )

    app = SyspropsApp(config)

    if args.command in (None, "apply"):
        app.fire(ApplicationReadyEvent())
    elif args.command == "wiki":
        for wiki_id in args.wiki_ids:
            app.fire(WikiReadyEvent(wiki_id))
    elif args.command == "flavor":
        extension = InstalledExtension(
            id=ExtensionId.parse(args.extension),
            category="flavor",
            namespaces=tuple(f"wiki:{w}" for w in args.wikis),
        )
        event_cls = ExtensionUpgradedEvent if args.upgrade else ExtensionInstalledEvent
        updated = app.fire(event_cls(extension))
        if not updated:
            print(f"Flavor {extension.id} is not the active flavor of {', '.join(args.wikis)}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
