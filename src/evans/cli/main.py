#!/usr/bin/env python3
"""
evans-config - inspect and edit the effective Evans configuration
"""

import argparse
import json
import logging
import sys
from typing import Optional

import tomli_w

from evans.config import (
    ConfigError,
    ConfigLoader,
    EvansConfig,
    LogConfig,
    find_local,
)

LOG_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def _setup_logging(verbose: bool, prefix: str) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=prefix + LOG_FORMAT,
        force=True,
    )


class EvansCLI:
    """Main CLI interface for Evans configuration."""

    def __init__(self, loader: Optional[ConfigLoader] = None):
        self.parser = self._create_parser()
        self.loader = loader

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="evans-config",
            description="Show and edit the effective Evans configuration",
        )
        parser.add_argument(
            "-v", "--verbose", action="store_true", help="Enable debug logging"
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        # show
        show_parser = subparsers.add_parser(
            "show", help="Show effective configuration (merged from all sources)"
        )
        show_parser.add_argument("--json", action="store_true", help="Output as JSON")

        # get
        get_parser = subparsers.add_parser("get", help="Get a configuration value")
        get_parser.add_argument(
            "key", help="Configuration key (e.g., server.port, repl.promptFormat)"
        )

        # path
        subparsers.add_parser(
            "path", help="Show the user config file and the local override in use"
        )

        # edit
        subparsers.add_parser("edit", help="Edit the user config file in $EDITOR")

        return parser

    def run(self, args=None) -> int:
        """Run the CLI."""
        args = self.parser.parse_args(args)

        if not args.command:
            self.parser.print_help()
            return 0

        _setup_logging(args.verbose, LogConfig().prefix)
        if self.loader is None:
            self.loader = ConfigLoader()

        try:
            if args.command == "show":
                return self._cmd_show(args)
            elif args.command == "get":
                return self._cmd_get(args)
            elif args.command == "path":
                return self._cmd_path(args)
            elif args.command == "edit":
                return self._cmd_edit(args)
            else:
                print(f"Error: Unknown command '{args.command}'", file=sys.stderr)
                return 1
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def _load(self, args) -> EvansConfig:
        config = self.loader.load()
        _setup_logging(args.verbose, config.log.prefix)
        return config

    def _cmd_show(self, args) -> int:
        """Print the effective configuration."""
        config = self._load(args)
        if args.json:
            print(json.dumps(config.to_dict(), indent=2))
        else:
            print(tomli_w.dumps(config.to_dict()), end="")
        return 0

    def _cmd_get(self, args) -> int:
        """Print a single configuration value."""
        config = self._load(args)
        value = config.get_nested(args.key)

        if value is None:
            print(f"Error: Unknown configuration key: {args.key}", file=sys.stderr)
            return 1

        if isinstance(value, dict):
            print(tomli_w.dumps(value), end="")
        elif isinstance(value, bool):
            print(str(value).lower())
        elif isinstance(value, list):
            print(json.dumps(value))
        else:
            print(value)
        return 0

    def _cmd_path(self, args) -> int:
        """Print where configuration is read from."""
        store = self.loader.store
        local = find_local(self.loader.cwd, self.loader.git_timeout)
        print(f"user\t{store.path}")
        print(f"local\t{local.path if local is not None else 'none'}")
        return 0

    def _cmd_edit(self, args) -> int:
        """Open the user config file in an editor."""
        self.loader.edit()
        return 0


def main():
    """Main entry point."""
    cli = EvansCLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
