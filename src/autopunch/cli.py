#!/usr/bin/env python3
"""
Command line entry point for attendance automation.

    autopunch serve              run the API with the cron scheduler
    autopunch once               run a single automation cycle and exit
    autopunch encrypt-password   print the stored form of a password
    autopunch generate-key       create a local key or a KMS-wrapped data key
"""
import argparse
import base64
import getpass
import logging
import os
import sys
from typing import List, Optional

from autopunch.config import validate_config
from autopunch.utils import setup_logging

logger = logging.getLogger(__name__)


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from autopunch.endpoints.config import get_api_config

    api_config = get_api_config()
    uvicorn.run(
        "autopunch.endpoints.main:app",
        host=args.host or api_config["host"],
        port=args.port or int(os.getenv("PORT", api_config["port"])),
        reload=api_config["reload"],
        log_level="debug" if args.verbose else "info",
    )
    return 0


def cmd_once(args: argparse.Namespace) -> int:
    from autopunch.bootstrap import build_services
    from autopunch.models import LockSource

    validate_config()
    services = build_services()

    if not services.lock.acquire(LockSource.MANUAL):
        logger.error("Execution already in progress")
        return 1

    try:
        summary = services.processor.process()
    finally:
        services.lock.release()
        services.close()

    logger.info(f"{'=' * 60}")
    logger.info("SUMMARY")
    logger.info(f"{'=' * 60}")
    logger.info(f"Actions processed: {len(summary.results)}")
    logger.info(f"Successful: {summary.succeeded}")
    logger.info(f"Failed: {summary.failed}")
    logger.info(f"{'=' * 60}")

    if summary.aborted or summary.failed > 0:
        return 1
    return 0


def cmd_encrypt_password(args: argparse.Namespace) -> int:
    from autopunch.kms import build_cipher

    password = args.password or getpass.getpass("Portal password: ")
    if not password:
        logger.error("Password must not be empty")
        return 1

    print(build_cipher().encrypt(password))
    return 0


def cmd_generate_key(args: argparse.Namespace) -> int:
    if args.kms:
        from autopunch.kms.service import KMSService

        _, wrapped = KMSService().generate_data_key()
        print(f"AUTOPUNCH_WRAPPED_DEK={base64.b64encode(wrapped).decode('ascii')}")
    else:
        from autopunch.kms import generate_key

        print(f"AUTOPUNCH_ENCRYPTION_KEY={generate_key().hex()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autopunch", description="Automate scheduled attendance punches")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--log-file", type=str, help="Path to log file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API and the scheduler")
    serve.add_argument("--host", type=str, help="Bind address")
    serve.add_argument("--port", type=int, help="Bind port")
    serve.set_defaults(handler=cmd_serve)

    once = subparsers.add_parser("once", help="Run one automation cycle and exit")
    once.set_defaults(handler=cmd_once)

    encrypt = subparsers.add_parser("encrypt-password", help="Encrypt a portal password for storage")
    encrypt.add_argument("--password", type=str, help="Password (prompted when omitted)")
    encrypt.set_defaults(handler=cmd_encrypt_password)

    keygen = subparsers.add_parser("generate-key", help="Generate a credential key")
    keygen.add_argument("--kms", action="store_true", help="Generate a data key wrapped by AWS KMS")
    keygen.set_defaults(handler=cmd_generate_key)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        return args.handler(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
