"""
Command Line Interface

    ifsc-resolver validate HDFC0000569 BDBL0001934
    ifsc-resolver bank-code ICIC00CNSBL
    ifsc-resolver bank-name KSCB0006001
    ifsc-resolver details UJVN0004516
    ifsc-resolver lookup IBKL0116SBK
    ifsc-resolver stats
"""

import argparse
import json
import sys
from typing import List, Optional

from . import __version__
from .config import get_config
from .datastore import load_datastore
from .errors import IFSCError
from .logging_config import get_logger, setup_logging
from .resolver import IFSCResolver, get_resolver


logger = get_logger("ifsc.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifsc-resolver",
        description="Validate IFSC codes and resolve them to the owning bank",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--data-dir", help="directory holding the JSON tables")
    parser.add_argument("--log-level", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="log level (default from IFSC_LOG_LEVEL)")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("validate", help="check that codes are registered IFSCs")
    p.add_argument("codes", nargs="+", metavar="CODE")

    p = sub.add_parser("bank-code", help="resolve the owning bank code of an IFSC")
    p.add_argument("code", metavar="IFSC")

    p = sub.add_parser("bank-name", help="resolve a bank name from an IFSC or bank code")
    p.add_argument("code", metavar="CODE")

    p = sub.add_parser("details", help="owning bank code and name of an IFSC")
    p.add_argument("code", metavar="IFSC")

    p = sub.add_parser("lookup", help="everything known about an IFSC, as JSON")
    p.add_argument("code", metavar="IFSC")

    sub.add_parser("stats", help="sizes of the loaded tables")
    return parser


def _resolver_for(args: argparse.Namespace) -> IFSCResolver:
    if args.data_dir:
        return IFSCResolver(load_datastore(args.data_dir))
    return get_resolver()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code"""
    args = build_parser().parse_args(argv)

    config = get_config()
    setup_logging(level=args.log_level or config.log_level, log_format=config.log_format)

    try:
        resolver = _resolver_for(args)

        if args.command == "validate":
            all_valid = True
            for code in args.codes:
                ok = resolver.validate(code)
                all_valid = all_valid and ok
                print(f"{code}: {'valid' if ok else 'invalid'}")
            return 0 if all_valid else 1

        if args.command == "bank-code":
            print(resolver.resolve_bank_code(args.code))
        elif args.command == "bank-name":
            print(resolver.resolve_bank_name(args.code))
        elif args.command == "details":
            details = resolver.get_bank_details_from_ifsc_code(args.code)
            print(json.dumps(details.to_dict(), indent=2))
        elif args.command == "lookup":
            print(json.dumps(resolver.lookup(args.code), indent=2))
        elif args.command == "stats":
            print(json.dumps(resolver.store.stats(), indent=2))
    except IFSCError as e:
        logger.debug("command %s failed: %s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0
