"""
qtext CLI - Command-line interface for info strings and entity text.

Commands:
  qtext validate     - Check that an info string is well-formed
  qtext get          - Print the value stored under a key
  qtext set          - Set a key and print the updated info string
  qtext remove       - Remove a key and print the updated info string
  qtext pairs        - List the key/value pairs of an info string
  qtext configstring - Check quote balance of a configstring
  qtext worldspawn   - Read a key from the worldspawn entity of an entity file
  qtext tokens       - Print the tokens of a text file, one per line
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from qtext.config import AppConfig, InfoLimits, load_config

# Entity lumps are small; refuse anything that is clearly not one
MAX_TEXT_FILE_SIZE = 16 * 1024 * 1024


def _read_info(arg: str, limits: InfoLimits) -> str:
    """Info string from the argument, or from stdin when the argument is '-'.

    Stdin longer than the configured limit (plus a line ending) is refused
    rather than cut short.
    """
    if arg != "-":
        return arg
    cap = limits.max_info_string + 2
    data = sys.stdin.read(cap + 1)
    if len(data) > cap:
        print(f"FAIL: input exceeds {limits.max_info_string} bytes", file=sys.stderr)
        sys.exit(1)
    return data.rstrip("\r\n")


def _read_text_file(path_arg: str) -> str:
    path = Path(path_arg)
    if not path.is_file():
        print(f"Error: File not found: {path_arg}", file=sys.stderr)
        sys.exit(1)
    file_size = path.stat().st_size
    if file_size > MAX_TEXT_FILE_SIZE:
        print(f"Error: File size {file_size} exceeds maximum {MAX_TEXT_FILE_SIZE} bytes", file=sys.stderr)
        sys.exit(1)
    return path.read_text(encoding="utf-8", errors="surrogateescape")


def _load_info(arg: str, limits: InfoLimits):
    from qtext.document import InfoString
    from qtext.errors import InfoStringError

    try:
        return InfoString(_read_info(arg, limits), limits)
    except InfoStringError:
        print("FAIL: malformed info string", file=sys.stderr)
        sys.exit(1)


def cmd_validate(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Validate an info string."""
    from qtext.info import validate_info

    info = _read_info(args.info, limits)
    if validate_info(info, limits):
        print("OK: valid info string")
    else:
        print("FAIL: malformed info string")
        sys.exit(1)


def cmd_get(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Print the value of a key."""
    from qtext.info import validate_key

    info = _load_info(args.info, limits)
    if not validate_key(args.key, limits):
        print(f"Error: invalid key {args.key!r}", file=sys.stderr)
        sys.exit(1)
    value = info.get(args.key)
    if value is None:
        print(f"Key '{args.key}' not found.", file=sys.stderr)
        sys.exit(1)
    print(value)


def cmd_set(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Set a key and print the resulting info string."""
    from qtext.errors import InfoStringError

    info = _load_info(args.info, limits)
    try:
        info.set(args.key, args.value)
    except InfoStringError as e:
        print(f"FAIL: [{e.code.value}] {e}", file=sys.stderr)
        sys.exit(1)
    print(info)


def cmd_remove(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Remove a key and print the resulting info string."""
    from qtext.info import validate_key

    info = _load_info(args.info, limits)
    if not validate_key(args.key, limits):
        print(f"Error: invalid key {args.key!r}", file=sys.stderr)
        sys.exit(1)
    info.remove(args.key)
    print(info)


def cmd_pairs(args: argparse.Namespace, limits: InfoLimits) -> None:
    """List the pairs of an info string."""
    info = _load_info(args.info, limits)
    items = info.items()
    if not items:
        print("(empty)")
        return
    width = max(len(k) for k, _ in items)
    for key, value in items:
        print(f"  {key:{width}s}  {value}")


def cmd_configstring(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Check configstring quote balance."""
    from qtext.info import validate_configstring

    if validate_configstring(_read_info(args.string, limits)):
        print("OK: balanced quotes")
    else:
        print("FAIL: unbalanced quotes")
        sys.exit(1)


def cmd_worldspawn(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Print a worldspawn key from an entity file."""
    from qtext.entities import parse_worldspawn_key
    from qtext.errors import EntityParseError

    text = _read_text_file(args.path)
    try:
        value = parse_worldspawn_key(text, args.key)
    except EntityParseError as e:
        print(f"FAIL: {e}", file=sys.stderr)
        sys.exit(1)
    if not value:
        print(f"Key '{args.key}' not found.", file=sys.stderr)
        sys.exit(1)
    print(value)


def cmd_tokens(args: argparse.Namespace, limits: InfoLimits) -> None:
    """Print tokens, or one line of tokens per input line with --lines."""
    from qtext.tokenizer import TokenCursor, iter_tokens, parse_line

    text = _read_text_file(args.path)
    if args.lines:
        cursor = TokenCursor(text)
        while True:
            tokens = parse_line(cursor)
            if tokens is None:
                break
            if tokens:
                print(" ".join(repr(t) for t in tokens))
        return
    for token in iter_tokens(text):
        print(repr(token))


def _configure_logging(config: AppConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    from qtext import __version__

    parser = argparse.ArgumentParser(
        prog="qtext",
        description="qtext - info strings and engine text formats.",
    )
    parser.add_argument("--version", action="version", version=f"qtext {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-c", "--config", help="Path to YAML config file")
    parser.add_argument("--max-info-string", type=int, help="Override the info string size limit")
    sub = parser.add_subparsers(dest="command")

    # validate
    p_validate = sub.add_parser("validate", help="Validate an info string")
    p_validate.add_argument("info", help="Info string, or - for stdin")

    # get
    p_get = sub.add_parser("get", help="Print the value of a key")
    p_get.add_argument("info", help="Info string, or - for stdin")
    p_get.add_argument("key", help="Key to look up")

    # set
    p_set = sub.add_parser("set", help="Set a key (moves it to the end)")
    p_set.add_argument("info", help="Info string, or - for stdin")
    p_set.add_argument("key", help="Key to set")
    p_set.add_argument("value", help="New value")

    # remove
    p_remove = sub.add_parser("remove", help="Remove a key")
    p_remove.add_argument("info", help="Info string, or - for stdin")
    p_remove.add_argument("key", help="Key to remove")

    # pairs
    p_pairs = sub.add_parser("pairs", help="List key/value pairs")
    p_pairs.add_argument("info", help="Info string, or - for stdin")

    # configstring
    p_cs = sub.add_parser("configstring", help="Check configstring quote balance")
    p_cs.add_argument("string", help="Configstring, or - for stdin")

    # worldspawn
    p_world = sub.add_parser("worldspawn", help="Read a worldspawn key from an entity file")
    p_world.add_argument("path", help="Path to entity text file")
    p_world.add_argument("key", help="Key name (case-insensitive)")

    # tokens
    p_tokens = sub.add_parser("tokens", help="Tokenize a text file")
    p_tokens.add_argument("path", help="Path to text file")
    p_tokens.add_argument("--lines", action="store_true", help="Group tokens by input line")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        config = load_config(args.config, {"protocol.max_info_string": args.max_info_string})
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)
    _configure_logging(config, args.verbose)
    limits = config.protocol.limits()

    commands = {
        "validate": cmd_validate,
        "get": cmd_get,
        "set": cmd_set,
        "remove": cmd_remove,
        "pairs": cmd_pairs,
        "configstring": cmd_configstring,
        "worldspawn": cmd_worldspawn,
        "tokens": cmd_tokens,
    }

    commands[args.command](args, limits)


if __name__ == "__main__":
    main()
