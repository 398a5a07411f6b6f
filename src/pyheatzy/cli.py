"""Command-line interface for Heatzy pilot-wire controllers.

Actions:
  states                  - List the supported heating states
  devices                 - List the registered device ids
  sync                    - Rebuild the device list from the cloud
  get-state <did>         - Show the current heating state of a device
  set-state <did> <state> - Change the heating state of a device
  get-mac <did>           - Show the MAC address of a device
  get-alias <did>         - Show the alias of a device
  get-product <did>       - Show the product family of a device
  init                    - Create the configuration file (needs --login/--password)

Examples:
  pyheatzy sync
  pyheatzy set-state did123 eco
  pyheatzy --login me@example.com --password secret get-state did123
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from pyheatzy import __version__
from pyheatzy.client import HeatzyClient
from pyheatzy.exceptions import CredentialsMissingError, HeatzyError, UnknownActionError
from pyheatzy.store import ConfigStore, CredentialStore


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


async def _states(client: HeatzyClient, args: argparse.Namespace) -> None:
    for state in client.list_states():
        print(state)


async def _devices(client: HeatzyClient, args: argparse.Namespace) -> None:
    for record in client.list_devices():
        print(record.did)


async def _sync(client: HeatzyClient, args: argparse.Namespace) -> None:
    for did in await client.sync():
        print(did)


async def _get_state(client: HeatzyClient, args: argparse.Namespace) -> None:
    print(await client.get_state(args.params[0]))


async def _set_state(client: HeatzyClient, args: argparse.Namespace) -> None:
    did, state = args.params
    print(await client.set_state(did, state))


async def _get_mac(client: HeatzyClient, args: argparse.Namespace) -> None:
    print(client.get_mac(args.params[0]))


async def _get_alias(client: HeatzyClient, args: argparse.Namespace) -> None:
    print(client.get_alias(args.params[0]))


async def _get_product(client: HeatzyClient, args: argparse.Namespace) -> None:
    print(client.get_product(args.params[0]))


async def _init(client: HeatzyClient, args: argparse.Namespace) -> None:
    if not args.login or not args.password:
        msg = "init needs --login and --password"
        raise CredentialsMissingError(msg)

    store = CredentialStore(ConfigStore(args.config))
    try:
        store.create(args.login, args.password)
    except FileExistsError as exc:
        raise HeatzyError(str(exc)) from None
    print(store.path)


# action name -> (positional parameter names, handler)
ACTIONS: dict[str, tuple[tuple[str, ...], Callable[[HeatzyClient, argparse.Namespace], Awaitable[None]]]] = {
    "states": ((), _states),
    "devices": ((), _devices),
    "sync": ((), _sync),
    "get-state": (("did",), _get_state),
    "set-state": (("did", "state"), _set_state),
    "get-mac": (("did",), _get_mac),
    "get-alias": (("did",), _get_alias),
    "get-product": (("did",), _get_product),
    "init": ((), _init),
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pyheatzy",
        description="Control Heatzy pilot-wire heating controllers through the Heatzy cloud",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Actions:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("action", help="Action to run (see list below)")
    parser.add_argument("params", nargs="*", help="Device id and state, depending on the action")
    parser.add_argument("-c", "--config", help="Configuration file (default: $HEATZY_CONFIG or ~/.heatzy.conf)")
    parser.add_argument("-l", "--login", help="Account login, overrides the configuration file")
    parser.add_argument("-p", "--password", help="Account password, overrides the configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress messages")
    parser.add_argument("-d", "--debug", action="store_true", help="Log raw requests and responses")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(*, verbose: bool = False, debug: bool = False) -> None:
    """Configure root logging for the command line."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


async def run(args: argparse.Namespace) -> None:
    """Run one action.

    Raises:
        UnknownActionError: If the action is not supported.
        HeatzyError: For any failure reported by the library.
    """
    try:
        _, handler = ACTIONS[args.action]
    except KeyError:
        msg = f"Unknown action '{args.action}' (expected one of: {', '.join(ACTIONS)})"
        raise UnknownActionError(msg) from None

    async with HeatzyClient(args.config, login=args.login, password=args.password) as client:
        await handler(client, args)


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Process exit status: 0 on success, 1 on any reported error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, debug=args.debug)

    expected = ACTIONS.get(args.action, ((), None))[0]
    if args.action in ACTIONS and len(args.params) != len(expected):
        usage = " ".join(f"<{name}>" for name in expected)
        parser.error(f"{args.action} expects {len(expected)} argument(s): {args.action} {usage}".rstrip())

    try:
        asyncio.run(run(args))
    except HeatzyError as exc:
        _LOGGER.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
