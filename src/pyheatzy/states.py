"""Translation between abstract heating states and product wire tokens.

Each product family speaks its own vocabulary for the same four pilot-wire
orders. The original Heatzy boxes are driven with a raw numeric triple and
report their mode as a Chinese label; Pilote2 boxes are driven and report
with short mnemonic strings through a named attribute.

A product is described by one ``ProductProtocol`` entry in ``PROTOCOLS``.
Supporting a new family means adding an entry, no code changes.

Example:
    >>> encode("Heatzy", "comfort")
    (1, 1, 0)
    >>> decode("Pilote2", "eco")
    'eco'
    >>> build_payload("Pilote2", encode("Pilote2", "freeze"))
    {'attrs': {'mode': 'fro'}}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pyheatzy.const import (
    PRODUCT_HEATZY,
    PRODUCT_PILOTE2,
    STATE_COMFORT,
    STATE_ECO,
    STATE_FREEZE,
    STATE_OFF,
    STATES,
)
from pyheatzy.exceptions import UnknownStateError, UnknownWireTokenError, UnsupportedProductError


__all__ = [
    "PROTOCOLS",
    "ModeAttributeProtocol",
    "ProductProtocol",
    "RawTripleProtocol",
    "WireToken",
    "build_payload",
    "decode",
    "encode",
    "get_protocol",
    "list_states",
]

WireToken = tuple[int, ...] | str


@dataclass(frozen=True)
class ProductProtocol:
    """State table and command encoding of one product family.

    Attributes:
        product: Product family name as reported by the cloud.
        commands: Abstract state to the token sent in control requests.
        reported: Additional tokens the device reports for a state in its
            latest data, when they differ from the command tokens.
    """

    product: str
    commands: Mapping[str, WireToken]
    reported: Mapping[WireToken, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        missing = [state for state in STATES if state not in self.commands]
        if missing:
            msg = f"Product {self.product} has no token for state(s): {', '.join(missing)}"
            raise ValueError(msg)

    def encode(self, state: str) -> WireToken:
        """Return the command token for an abstract state."""
        try:
            return self.commands[state]
        except KeyError:
            msg = f"Unknown state '{state}' (expected one of: {', '.join(STATES)})"
            raise UnknownStateError(msg, state=state) from None

    def decode(self, token: Any) -> str:
        """Return the abstract state for a command or reported token."""
        key = self.normalize(token)
        for state, command in self.commands.items():
            if command == key:
                return state
        try:
            return self.reported[key]
        except (KeyError, TypeError):
            msg = f"Unknown {self.product} mode: {token!r}"
            raise UnknownWireTokenError(msg, token=token) from None

    def normalize(self, token: Any) -> Any:
        """Bring a token decoded from JSON into table form."""
        return token

    def payload(self, token: WireToken) -> dict[str, Any]:
        """Build the control request body for a command token."""
        raise NotImplementedError


@dataclass(frozen=True)
class RawTripleProtocol(ProductProtocol):
    """Product driven by a raw numeric opcode triple."""

    def normalize(self, token: Any) -> Any:
        if isinstance(token, list):
            return tuple(token)
        return token

    def payload(self, token: WireToken) -> dict[str, Any]:
        return {"raw": list(token)}


@dataclass(frozen=True)
class ModeAttributeProtocol(ProductProtocol):
    """Product driven through its named ``mode`` attribute."""

    def payload(self, token: WireToken) -> dict[str, Any]:
        return {"attrs": {"mode": token}}


PROTOCOLS: dict[str, ProductProtocol] = {
    PRODUCT_HEATZY: RawTripleProtocol(
        product=PRODUCT_HEATZY,
        commands={
            STATE_COMFORT: (1, 1, 0),
            STATE_ECO: (1, 1, 1),
            STATE_FREEZE: (1, 1, 2),
            STATE_OFF: (1, 1, 3),
        },
        reported={
            "舒适": STATE_COMFORT,
            "经济": STATE_ECO,
            "解冻": STATE_FREEZE,
            "停止": STATE_OFF,
        },
    ),
    PRODUCT_PILOTE2: ModeAttributeProtocol(
        product=PRODUCT_PILOTE2,
        commands={
            STATE_COMFORT: "cft",
            STATE_ECO: "eco",
            STATE_FREEZE: "fro",
            STATE_OFF: "stop",
        },
    ),
}


def list_states() -> tuple[str, ...]:
    """Return the abstract states understood by every product."""
    return STATES


def get_protocol(product: str) -> ProductProtocol:
    """Return the protocol of a product family.

    Raises:
        UnsupportedProductError: If the product has no state table.
    """
    try:
        return PROTOCOLS[product]
    except KeyError:
        msg = f"Unsupported product '{product}' (supported: {', '.join(PROTOCOLS)})"
        raise UnsupportedProductError(msg, product=product) from None


def encode(product: str, state: str) -> WireToken:
    """Translate an abstract state into the product's command token.

    Raises:
        UnsupportedProductError: If the product has no state table.
        UnknownStateError: If the state is not one of the abstract states.
    """
    return get_protocol(product).encode(state)


def decode(product: str, token: Any) -> str:
    """Translate a command or reported token back into an abstract state.

    Raises:
        UnsupportedProductError: If the product has no state table.
        UnknownWireTokenError: If the token is not in the product's table.
    """
    return get_protocol(product).decode(token)


def build_payload(product: str, token: WireToken) -> dict[str, Any]:
    """Build the control request body carrying a command token."""
    return get_protocol(product).payload(token)
