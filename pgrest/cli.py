"""
pgrest Command Line Interface.

Provides commands for probing the master/slave services, reading a table,
and minting a bearer token. Connection settings come from PGREST_*
environment variables (see pgrest.config).
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

import httpx

from pgrest.agent import MASTER, Agent
from pgrest.config import Config
from pgrest.errors import PgrestError
from pgrest.signer import JWSSigner
from pgrest.transport import HTTPXTransport


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def _parse_query(pairs: Optional[List[str]]) -> Dict[str, List[str]]:
    query: Dict[str, List[str]] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Query parameter must be key=value: {pair!r}")
        query.setdefault(key, []).append(value)
    return query


def cmd_ping(agent: Agent, args: argparse.Namespace) -> int:
    """Check that both services answer."""
    try:
        agent.ping()
    except PgrestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print("OK")
    return 0


def cmd_get(agent: Agent, args: argparse.Namespace) -> int:
    """Read rows from a table and print them as JSON."""
    try:
        query = _parse_query(args.query)
        status, rows = agent.get_json(args.table, query, target=Any)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (PgrestError, httpx.HTTPError) as e:
        print(f"Error reading {args.table}: {e}", file=sys.stderr)
        return 1

    print(json.dumps(rows, indent=2))
    return 0


def cmd_token(agent: Agent, args: argparse.Namespace) -> int:
    """Print a freshly minted token for the master or slave identity."""
    config = agent.config
    if args.identity == MASTER:
        role, secret = config.master_role, config.master_secret
    else:
        role, secret = config.slave_role, config.slave_secret

    try:
        token = agent.issue_token(role, secret)
    except PgrestError as e:
        print(f"Error signing token: {e}", file=sys.stderr)
        return 1

    if args.header:
        print(f"Authorization: Bearer {token}")
    else:
        print(token)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog='pgrest',
        description='pgrest CLI - Authenticated requests to master/slave PostgREST services'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ping command
    subparsers.add_parser('ping', help='Check the master and slave services')

    # get command
    p_get = subparsers.add_parser('get', help='Read rows from a table')
    p_get.add_argument('table', help='Table or view name')
    p_get.add_argument('-q', '--query', action='append', metavar='KEY=VALUE',
                       help='PostgREST query parameter, e.g. id=eq.1 (repeatable)')

    # token command
    p_token = subparsers.add_parser('token', help='Mint a bearer token')
    p_token.add_argument('identity', choices=['master', 'slave'], help='Identity to sign for')
    p_token.add_argument('--header', action='store_true', help='Output as an Authorization header')

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    commands = {'ping': cmd_ping, 'get': cmd_get, 'token': cmd_token}
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    config = Config.from_env()
    try:
        config.validate()
    except PgrestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with Agent(config, HTTPXTransport(), JWSSigner()) as agent:
        return command(agent, args)


if __name__ == '__main__':
    sys.exit(main())
