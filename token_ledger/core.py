"""
Core types and pure functions for the token ledger.

This module provides the foundational data structures for the ledger:
1. Constants: zero address, integer width, unlimited allowance, default decimals
2. Exceptions: LedgerError and the validation failures it specializes into
3. Immutable data structures: TokenMetadata, Transfer, Approval, Receipt
4. Validation helpers: pure checks on addresses and amounts

Nothing in this module mutates ledger state. The Ledger class in ledger.py
is the only owner of balances, allowances and total supply.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Union


# ============================================================================
# CONSTANTS
# ============================================================================

# Reserved account used as the counterparty of mint and burn events.
# Never a valid sender, recipient, owner or spender.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Amounts use 256-bit unsigned semantics.
UINT256_BITS = 256
MAX_UINT256 = 2 ** UINT256_BITS - 1

# An allowance of exactly this value is never decremented by transfer_from.
UNLIMITED_ALLOWANCE = MAX_UINT256

DEFAULT_DECIMALS = 18

# Prefix for every validation message, e.g. "ERC20: insufficient allowance".
ERROR_PREFIX = "ERC20"

EVENT_TRANSFER = "Transfer"
EVENT_APPROVAL = "Approval"


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Account identifier (any non-empty string, typically a hex address).
Address = str

# Mapping from account to token balance.
BalanceMap = Dict[Address, int]

# Mapping from (owner, spender) to allowance.
AllowanceMap = Dict[Tuple[Address, Address], int]


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InvalidParty(LedgerError):
    """Raised when the zero address is named as a sender, recipient, owner or spender."""
    pass


class InsufficientBalance(LedgerError):
    """Raised when an account's balance is less than the amount moved or burned."""
    pass


class InsufficientAllowance(LedgerError):
    """Raised when a spender's allowance is less than the transfer_from amount."""
    pass


class AllowanceUnderflow(LedgerError):
    """Raised when decrease_allowance would take an allowance below zero."""
    pass


class AllowanceOverflow(LedgerError):
    """Raised when increase_allowance would exceed MAX_UINT256."""
    pass


class SupplyOverflow(LedgerError):
    """Raised when a mint would push total supply above MAX_UINT256."""
    pass


class InvalidAmount(LedgerError, ValueError):
    """Raised when an amount is not an integer in [0, MAX_UINT256]."""
    pass


class InvalidAddress(LedgerError, ValueError):
    """Raised when an account identifier is not a non-empty string."""
    pass


# ============================================================================
# METADATA
# ============================================================================

@dataclass(frozen=True, slots=True)
class TokenMetadata:
    """
    Immutable token metadata fixed at construction.

    Attributes:
        name: Human-readable token name (e.g., "My Token").
        symbol: Ticker symbol (e.g., "MTKN").
        decimals: Display precision. Purely informational, all amounts are
                  integers in the token's smallest unit.
    """
    name: str
    symbol: str
    decimals: int = DEFAULT_DECIMALS

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise ValueError(f"Token name must be str, got {type(self.name)}")
        if not isinstance(self.symbol, str):
            raise ValueError(f"Token symbol must be str, got {type(self.symbol)}")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ValueError(f"Token decimals must be int, got {type(self.decimals)}")
        if self.decimals < 0:
            raise ValueError(f"Token decimals must be non-negative, got {self.decimals}")


# ============================================================================
# EVENTS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transfer:
    """
    Balance movement notification.

    Emitted on every transfer, including mint (sender is ZERO_ADDRESS)
    and burn (recipient is ZERO_ADDRESS).
    """
    sender: Address
    recipient: Address
    amount: int

    @property
    def kind(self) -> str:
        return EVENT_TRANSFER

    def __repr__(self) -> str:
        return f"Transfer({self.sender}→{self.recipient}: {self.amount})"


@dataclass(frozen=True, slots=True)
class Approval:
    """
    Allowance change notification.

    Carries the resulting allowance, never the delta.
    """
    owner: Address
    spender: Address
    amount: int

    @property
    def kind(self) -> str:
        return EVENT_APPROVAL

    def __repr__(self) -> str:
        return f"Approval({self.owner}→{self.spender}: {self.amount})"


Event = Union[Transfer, Approval]

# Listener callback signature. Listeners are invoked synchronously, once per
# event, after the mutation has been applied.
EventListener = Callable[[Event], Any]


@dataclass(frozen=True, slots=True)
class Receipt:
    """
    Immutable record of a successful mutation.

    Attributes:
        operation: Name of the ledger operation (e.g., "transfer_from").
        events: Events emitted by the operation, in emission order.
        sequence_number: Monotonic position within the ledger's receipt log.
    """
    operation: str
    events: Tuple[Event, ...]
    sequence_number: int

    def emitted(self, kind: Optional[str] = None) -> Tuple[Event, ...]:
        """Return events of the given kind ("Transfer" or "Approval"), or all events."""
        if kind is None:
            return self.events
        return tuple(e for e in self.events if e.kind == kind)

    def __repr__(self) -> str:
        events = ", ".join(repr(e) for e in self.events)
        return f"Receipt(#{self.sequence_number} {self.operation}: [{events}])"


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def revert_message(reason: str) -> str:
    """Prefix a failure reason, e.g. "insufficient allowance" -> "ERC20: insufficient allowance"."""
    return f"{ERROR_PREFIX}: {reason}"


def require_address(account: Any) -> Address:
    """
    Check that an account identifier is a non-empty string.

    The zero address passes this check; whether it is allowed depends on
    the role it plays in the operation.

    Raises:
        InvalidAddress: If account is not a non-empty string.
    """
    if not isinstance(account, str) or not account.strip():
        raise InvalidAddress(f"Account must be a non-empty string, got {account!r}")
    return account


def require_amount(amount: Any) -> int:
    """
    Check that an amount is an integer in [0, MAX_UINT256].

    bool is rejected even though it subclasses int.

    Raises:
        InvalidAmount: If amount is not a valid uint256.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"Amount must be int, got {type(amount)}")
    if amount < 0:
        raise InvalidAmount(f"Amount must be non-negative, got {amount}")
    if amount > MAX_UINT256:
        raise InvalidAmount(f"Amount exceeds uint256 range: {amount}")
    return amount


def is_zero_address(account: Address) -> bool:
    return account == ZERO_ADDRESS
