"""
Sealgate CLI — entry point for all operations.

Usage:
    sealgate serve              # Serve sealed files on the $LISTEN_ON unix socket
    sealgate seal FILE -o OUT   # Seal a plaintext file (passphrase from env or prompt)
    sealgate unseal FILE        # Decrypt a sealed file to stdout
    sealgate version            # Show version

Passphrases are read from $SEALGATE_PASSPHRASE or an interactive prompt,
never from the command line.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sealgate",
        description="Sealgate — serve passphrase-encrypted files, decrypted on demand.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the gateway on $LISTEN_ON")
    serve_parser.add_argument(
        "--env-file", type=str, help="Load environment variables from this file first"
    )

    # seal
    seal_parser = subparsers.add_parser("seal", help="Seal a plaintext file")
    seal_parser.add_argument("source", type=Path, help="Plaintext file")
    seal_parser.add_argument("-o", "--output", type=Path, help="Output (default: SOURCE.sealed)")

    # unseal
    unseal_parser = subparsers.add_parser("unseal", help="Decrypt a sealed file to stdout")
    unseal_parser.add_argument("source", type=Path, help="Sealed file")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from sealgate import __version__

        print(f"sealgate {__version__}")
        return 0

    if args.command == "serve":
        return _cmd_serve(args)
    elif args.command == "seal":
        return _cmd_seal(args)
    elif args.command == "unseal":
        return _cmd_unseal(args)

    parser.print_help()
    return 0


def _read_passphrase(confirm: bool = False) -> bytes | None:
    env_value = os.environ.get("SEALGATE_PASSPHRASE")
    if env_value:
        return env_value.encode("utf-8")
    passphrase = getpass.getpass("Passphrase: ")
    if confirm and getpass.getpass("Repeat passphrase: ") != passphrase:
        print("Error: passphrases do not match", file=sys.stderr)
        return None
    if not passphrase:
        print("Error: empty passphrase", file=sys.stderr)
        return None
    return passphrase.encode("utf-8")


def _cmd_seal(args: argparse.Namespace) -> int:
    from sealgate.vault.crypto import seal_file

    if not args.source.is_file():
        print(f"Error: {args.source} is not a file", file=sys.stderr)
        return 1
    passphrase = _read_passphrase(confirm=True)
    if passphrase is None:
        return 1
    output = args.output or args.source.with_name(args.source.name + ".sealed")
    seal_file(args.source, output, passphrase)
    print(f"Sealed {args.source} -> {output}")
    return 0


def _cmd_unseal(args: argparse.Namespace) -> int:
    from sealgate.vault.crypto import UnsealError, unseal_file

    passphrase = _read_passphrase()
    if passphrase is None:
        return 1
    try:
        plaintext = unseal_file(args.source, passphrase)
    except (OSError, UnsealError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    sys.stdout.buffer.write(plaintext)
    sys.stdout.buffer.flush()
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    if args.env_file:
        from dotenv import load_dotenv

        if not load_dotenv(args.env_file):
            print(f"Error: cannot load env file {args.env_file}", file=sys.stderr)
            return 1

    from sealgate.config import ConfigError, get_config, require_socket_path

    try:
        config = get_config()
        socket_path = require_socket_path(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is required. Install with: pip install sealgate", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger = logging.getLogger("sealgate")

    from sealgate.gateway.app import create_app

    app = create_app(config)
    logger.info("Listening on %s (root %s, backend %s)", socket_path, config.root, config.backend)
    try:
        uvicorn.run(app, uds=str(socket_path), log_config=None, access_log=False)
    except OSError as e:
        logger.error("Binding server to %s failed: %s", socket_path, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
