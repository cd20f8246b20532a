"""
token_ledger - Fungible Token Ledger

An in-memory ERC20-style token ledger with an enumerable holder index.

Usage:
    from token_ledger import Ledger, ZERO_ADDRESS, UNLIMITED_ALLOWANCE

    token = Ledger("My Token", "MTKN", "alice", 100)

    # Direct transfer
    token.transfer("alice", "bob", 10)

    # Delegated transfer
    token.approve("alice", "carol", 50)
    receipt = token.transfer_from("alice", "carol", "dave", 20)
    receipt.emitted("Transfer")   # (Transfer(alice→dave: 20),)

    # Supply changes
    token.mint("bob", 5)
    token.burn("alice", 5)
"""

# Core types
from .core import (
    Address,
    BalanceMap,
    AllowanceMap,
    TokenMetadata,
    Transfer,
    Approval,
    Event,
    EventListener,
    Receipt,
    LedgerError,
    InvalidParty,
    InsufficientBalance,
    InsufficientAllowance,
    AllowanceUnderflow,
    AllowanceOverflow,
    SupplyOverflow,
    InvalidAmount,
    InvalidAddress,
    require_address,
    require_amount,
    is_zero_address,
    ZERO_ADDRESS,
    MAX_UINT256,
    UNLIMITED_ALLOWANCE,
    DEFAULT_DECIMALS,
    ERROR_PREFIX,
    EVENT_TRANSFER,
    EVENT_APPROVAL,
)

# Ledger
from .ledger import Ledger

__all__ = [
    # Core
    'Address', 'BalanceMap', 'AllowanceMap',
    'TokenMetadata', 'Transfer', 'Approval', 'Event', 'EventListener', 'Receipt',
    'LedgerError', 'InvalidParty', 'InsufficientBalance', 'InsufficientAllowance',
    'AllowanceUnderflow', 'AllowanceOverflow', 'SupplyOverflow',
    'InvalidAmount', 'InvalidAddress',
    'require_address', 'require_amount', 'is_zero_address',
    'ZERO_ADDRESS', 'MAX_UINT256', 'UNLIMITED_ALLOWANCE', 'DEFAULT_DECIMALS',
    'ERROR_PREFIX', 'EVENT_TRANSFER', 'EVENT_APPROVAL',
    # Ledger
    'Ledger',
]

__version__ = '1.0.0'
