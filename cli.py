"""
Command-line tool for inspecting and editing a SealedConfig configuration.

Examples:
    python cli.py stamp 'build-secret'          # bake the key file secret into this build
    python cli.py --config config.json show     # first run prompts for a passphrase
    python cli.py set PORT 8080 --json
    python cli.py get PORT --type int
    python cli.py passwd
"""
# cli.py

import argparse
import json
import logging
import sys
from getpass import getpass
from pathlib import Path

from sealedconfig import buildinfo
from sealedconfig.errors import ConfigStoreError
from sealedconfig.store import DEFAULT_CONFIG_FILE, ConfigStore

logger = logging.getLogger("sealedconfig.cli")

GETTERS = {
    "any": "get",
    "string": "get_string",
    "int": "get_int",
    "float": "get_float",
    "bool": "get_bool",
    "map": "get_map",
    "array": "get_array",
}


def _print_value(value):
    if isinstance(value, str):
        print(value)
    else:
        print(json.dumps(value, indent=2, ensure_ascii=False))


def cmd_show(store, args):
    for key in store.keys():
        print(f"{key} = {json.dumps(store.get(key), ensure_ascii=False)}")
    return 0


def cmd_get(store, args):
    _print_value(getattr(store, GETTERS[args.type])(args.key))
    return 0


def cmd_set(store, args):
    value = args.value
    if args.json:
        try:
            value = json.loads(args.value)
        except json.JSONDecodeError as exc:
            print(f"error: value is not valid JSON: {exc}", file=sys.stderr)
            return 2
    store.set(args.key, value)
    return 0


def cmd_del(store, args):
    store.delete(args.key)
    return 0


def cmd_export(store, args):
    print(store.export_plaintext())
    return 0


def cmd_passwd(store, args):
    new_passphrase = getpass("New configuration password: ")
    if not new_passphrase.strip():
        print("error: the password must not be empty", file=sys.stderr)
        return 2
    if new_passphrase != getpass("Repeat new password: "):
        print("error: passwords do not match", file=sys.stderr)
        return 2
    store.set_pass(new_passphrase)
    print("Configuration password changed.")
    return 0


def stamp_build_secret(secret, target=None):
    """Writes `secret` into `sealedconfig/buildinfo.py` so the build carries it."""
    target = Path(target or buildinfo.__file__)
    source = target.read_text(encoding="utf-8")
    lines = [
        f"KEY_FILE_PASSWORD = {secret!r}" if line.startswith("KEY_FILE_PASSWORD =") else line
        for line in source.splitlines()
    ]
    target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return target


def build_parser():
    parser = argparse.ArgumentParser(prog="sealedconfig", description="Manage an encrypted configuration file.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_FILE, help="encrypted config file (default: %(default)s)")
    parser.add_argument("--key-file", default="", help="key file holding the config password")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="list all settings").set_defaults(func=cmd_show)

    p = sub.add_parser("get", help="print one setting")
    p.add_argument("key")
    p.add_argument("--type", choices=sorted(GETTERS), default="any")
    p.set_defaults(func=cmd_get)

    p = sub.add_parser("set", help="store a setting")
    p.add_argument("key")
    p.add_argument("value")
    p.add_argument("--json", action="store_true", help="parse VALUE as JSON (numbers, booleans, objects...)")
    p.set_defaults(func=cmd_set)

    p = sub.add_parser("del", help="remove a setting")
    p.add_argument("key")
    p.set_defaults(func=cmd_del)

    sub.add_parser("export", help="print the decrypted settings as JSON").set_defaults(func=cmd_export)
    sub.add_parser("passwd", help="change the config password").set_defaults(func=cmd_passwd)

    p = sub.add_parser("stamp", help="write the key file secret into this build")
    p.add_argument("secret")
    p.set_defaults(func=None)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    if args.command == "stamp":
        if not args.secret:
            print("error: the secret must not be empty", file=sys.stderr)
            return 2
        target = stamp_build_secret(args.secret)
        print(f"Build secret written to {target}")
        return 0

    try:
        store = ConfigStore(args.config, args.key_file).open()
        return args.func(store, args)
    except ConfigStoreError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
