"""
ledger.py - Stateful Fungible Token Ledger

The Ledger class is the central state manager for the token ledger.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Holds balances, allowances and total supply for a single token
    - Validates every mutation before applying it (all-or-nothing)
    - Emits Transfer and Approval events to the receipt log and to listeners
    - Enumerates current holders in a stable order
    - Provides clone() for isolated what-if copies
"""

from __future__ import annotations
from itertools import islice
from typing import Dict, List, Optional, Any

from .core import (
    # Types
    Address, BalanceMap, AllowanceMap,
    TokenMetadata, Transfer, Approval, Event, EventListener, Receipt,
    # Constants
    ZERO_ADDRESS, MAX_UINT256, UNLIMITED_ALLOWANCE, DEFAULT_DECIMALS,
    # Exceptions
    LedgerError, InvalidParty, InsufficientBalance, InsufficientAllowance,
    AllowanceUnderflow, AllowanceOverflow, SupplyOverflow,
    # Helper functions
    require_address, require_amount, is_zero_address, revert_message,
)


class Ledger:
    """
    ERC20-style token ledger with an enumerable holder index.

    Balances and allowances are plain integer mappings; absent entries read
    as zero. The sum of all balances always equals total_supply().

    Every mutating method either raises a LedgerError subclass and leaves
    the ledger untouched, or applies its changes and returns a Receipt
    holding the events it emitted.

    Thread Safety:
        Not thread-safe. Callers sharing a ledger must serialize access.

    Example:
        token = Ledger("My Token", "MTKN", "alice", 100)
        token.approve("alice", "bob", 40)
        receipt = token.transfer_from("alice", "bob", "carol", 25)
        token.balance_of("carol")       # 25
        token.allowance("alice", "bob")  # 15
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        initial_holder: Optional[Address] = None,
        initial_supply: int = 0,
        decimals: Optional[int] = None,
        verbose: bool = True,
    ):
        """
        Create a token ledger and mint the initial supply.

        Args:
            name: Token name
            symbol: Token symbol
            initial_holder: Account receiving initial_supply (None = no initial mint)
            initial_supply: Amount minted to initial_holder at construction
            decimals: Display decimals (default: 18)
            verbose: Print one line per applied or rejected operation (default: True)

        Raises:
            InvalidParty: If initial_holder is the zero address
            ValueError: If initial_supply is non-zero without an initial_holder
        """
        self.metadata = TokenMetadata(
            name=name,
            symbol=symbol,
            decimals=DEFAULT_DECIMALS if decimals is None else decimals,
        )
        self.verbose = verbose
        self.balances: BalanceMap = {}
        self.allowances: AllowanceMap = {}
        self._total_supply: int = 0
        self.receipts: List[Receipt] = []
        self.event_log: List[Event] = []
        self._listeners: List[EventListener] = []
        self._next_sequence: int = 0

        if initial_holder is None:
            if initial_supply:
                raise ValueError("initial_supply requires an initial_holder")
        else:
            self.mint(initial_holder, initial_supply)

    # ========================================================================
    # QUERIES (read-only)
    # ========================================================================

    def name(self) -> str:
        return self.metadata.name

    def symbol(self) -> str:
        return self.metadata.symbol

    def decimals(self) -> int:
        return self.metadata.decimals

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: Address) -> int:
        """Balance of an account, 0 if it never held tokens."""
        return self.balances.get(account, 0)

    def allowance(self, owner: Address, spender: Address) -> int:
        """Amount spender may still move out of owner's balance, 0 if never approved."""
        return self.allowances.get((owner, spender), 0)

    # ========================================================================
    # ENUMERATION
    # ========================================================================

    def holder_count(self) -> int:
        """Number of accounts with a non-zero balance."""
        return len(self.balances)

    def holder_at(self, index: int) -> Address:
        """
        Return the holder at a position in the holder index.

        Holders are ordered by when they last went from a zero to a non-zero
        balance. The order is stable between mutations.

        Raises:
            IndexError: If index is outside [0, holder_count())
        """
        if index < 0 or index >= len(self.balances):
            raise IndexError(
                f"holder index {index} out of range for {len(self.balances)} holders"
            )
        return next(islice(self.balances, index, None))

    def holders(self) -> List[Address]:
        """All accounts with a non-zero balance, in holder index order."""
        return list(self.balances)

    def positions(self) -> BalanceMap:
        """Mapping of every holder to its balance."""
        return dict(self.balances)

    def verify_supply(self) -> Dict[str, Any]:
        """
        Verify the supply invariant: the sum of all balances equals total supply.

        Returns:
            Dict with keys:
            - 'valid': bool - True if the invariant holds and no balance is negative
            - 'total_supply': int - Recorded total supply
            - 'sum_of_balances': int - Sum over all holders
            - 'negative_balances': Dict[str, int] - Accounts below zero (always empty
              unless state was tampered with directly)

        Example:
            result = token.verify_supply()
            assert result['valid'], result
        """
        sum_of_balances = sum(self.balances.values())
        negative = {a: b for a, b in self.balances.items() if b < 0}
        return {
            'valid': sum_of_balances == self._total_supply and not negative,
            'total_supply': self._total_supply,
            'sum_of_balances': sum_of_balances,
            'negative_balances': negative,
        }

    # ========================================================================
    # EVENTS
    # ========================================================================

    def subscribe(self, listener: EventListener) -> None:
        """
        Register a callback invoked with every event emitted from now on.

        Listeners run synchronously, after the mutation is applied and logged,
        in subscription order. An exception raised by a listener does not stop
        delivery to the others; the first one propagates to the caller of the
        mutating method once every listener has seen every event.
        """
        self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """
        Remove a previously registered callback.

        Raises:
            ValueError: If the listener is not subscribed
        """
        try:
            self._listeners.remove(listener)
        except ValueError:
            raise ValueError(f"Listener {listener!r} is not subscribed") from None

    def events(self, kind: Optional[str] = None) -> List[Event]:
        """Return the event log, optionally filtered to "Transfer" or "Approval"."""
        if kind is None:
            return list(self.event_log)
        return [e for e in self.event_log if e.kind == kind]

    # ========================================================================
    # MUTATIONS
    # ========================================================================

    def transfer(self, sender: Address, recipient: Address, amount: int) -> Receipt:
        """
        Move amount from sender to recipient.

        A zero amount is a valid no-op that still emits Transfer.

        Raises:
            InvalidParty: If sender or recipient is the zero address
            InsufficientBalance: If sender holds less than amount
        """
        require_address(sender)
        require_address(recipient)
        require_amount(amount)
        self._check_transfer("transfer", sender, recipient, amount)

        self._move(sender, recipient, amount)
        return self._commit("transfer", [Transfer(sender, recipient, amount)])

    def approve(self, owner: Address, spender: Address, amount: int) -> Receipt:
        """
        Set spender's allowance over owner's tokens to amount.

        Replaces any previous allowance. The amount may exceed owner's balance.

        Raises:
            InvalidParty: If owner or spender is the zero address
        """
        require_address(owner)
        require_address(spender)
        require_amount(amount)
        self._check_approve("approve", owner, spender)

        self._set_allowance(owner, spender, amount)
        return self._commit("approve", [Approval(owner, spender, amount)])

    def transfer_from(
        self,
        owner: Address,
        spender: Address,
        recipient: Address,
        amount: int
    ) -> Receipt:
        """
        Spender moves amount from owner to recipient, consuming allowance.

        The allowance check runs before the zero-spender and balance checks,
        so a zero spender with a positive amount reports InsufficientAllowance.
        An allowance equal
        to UNLIMITED_ALLOWANCE is left untouched and no Approval is emitted;
        otherwise the allowance is decremented and Approval carries the
        remaining amount. Events are emitted as Approval (if any), then Transfer.

        Raises:
            InvalidParty: If owner or recipient is the zero address, or spender
                is the zero address and amount is 0
            InsufficientAllowance: If spender's allowance is less than amount
            InsufficientBalance: If owner holds less than amount
        """
        operation = "transfer_from"
        require_address(owner)
        require_address(spender)
        require_address(recipient)
        require_amount(amount)

        if is_zero_address(owner):
            raise self._fail(operation, InvalidParty(revert_message("transfer from the zero address")))
        if is_zero_address(recipient):
            raise self._fail(operation, InvalidParty(revert_message("transfer to the zero address")))

        current = self.allowance(owner, spender)
        if current < amount:
            raise self._fail(operation, InsufficientAllowance(revert_message("insufficient allowance")))
        # Zero spender holds no allowance, so only a zero amount gets here.
        if is_zero_address(spender):
            raise self._fail(operation, InvalidParty(revert_message("approve to the zero address")))
        if self.balance_of(owner) < amount:
            raise self._fail(
                operation, InsufficientBalance(revert_message("transfer amount exceeds balance"))
            )

        events: List[Event] = []
        if current != UNLIMITED_ALLOWANCE:
            remaining = current - amount
            self._set_allowance(owner, spender, remaining)
            events.append(Approval(owner, spender, remaining))
        self._move(owner, recipient, amount)
        events.append(Transfer(owner, recipient, amount))
        return self._commit(operation, events)

    def increase_allowance(self, owner: Address, spender: Address, added_value: int) -> Receipt:
        """
        Add added_value to spender's allowance over owner's tokens.

        Raises:
            InvalidParty: If owner or spender is the zero address
            AllowanceOverflow: If the new allowance would exceed MAX_UINT256
        """
        operation = "increase_allowance"
        require_address(owner)
        require_address(spender)
        require_amount(added_value)
        self._check_approve(operation, owner, spender)

        new_allowance = self.allowance(owner, spender) + added_value
        if new_allowance > MAX_UINT256:
            raise self._fail(operation, AllowanceOverflow(revert_message("allowance overflow")))

        self._set_allowance(owner, spender, new_allowance)
        return self._commit(operation, [Approval(owner, spender, new_allowance)])

    def decrease_allowance(self, owner: Address, spender: Address, subtracted_value: int) -> Receipt:
        """
        Subtract subtracted_value from spender's allowance over owner's tokens.

        The underflow check runs first, so a positive decrease against the
        zero address reports AllowanceUnderflow (its allowance is always 0).

        Raises:
            AllowanceUnderflow: If subtracted_value exceeds the current allowance
            InvalidParty: If owner or spender is the zero address
        """
        operation = "decrease_allowance"
        require_address(owner)
        require_address(spender)
        require_amount(subtracted_value)

        current = self.allowance(owner, spender)
        if subtracted_value > current:
            raise self._fail(
                operation, AllowanceUnderflow(revert_message("decreased allowance below zero"))
            )
        self._check_approve(operation, owner, spender)

        new_allowance = current - subtracted_value
        self._set_allowance(owner, spender, new_allowance)
        return self._commit(operation, [Approval(owner, spender, new_allowance)])

    def mint(self, recipient: Address, amount: int) -> Receipt:
        """
        Create amount new tokens and credit them to recipient.

        Raises:
            InvalidParty: If recipient is the zero address
            SupplyOverflow: If total supply would exceed MAX_UINT256
        """
        operation = "mint"
        require_address(recipient)
        require_amount(amount)
        if is_zero_address(recipient):
            raise self._fail(operation, InvalidParty(revert_message("mint to the zero address")))
        if self._total_supply + amount > MAX_UINT256:
            raise self._fail(operation, SupplyOverflow(revert_message("total supply overflow")))

        self._total_supply += amount
        self._update_balance(recipient, self.balance_of(recipient) + amount)
        return self._commit(operation, [Transfer(ZERO_ADDRESS, recipient, amount)])

    def burn(self, owner: Address, amount: int) -> Receipt:
        """
        Destroy amount tokens held by owner.

        Raises:
            InvalidParty: If owner is the zero address
            InsufficientBalance: If owner holds less than amount
        """
        operation = "burn"
        require_address(owner)
        require_amount(amount)
        if is_zero_address(owner):
            raise self._fail(operation, InvalidParty(revert_message("burn from the zero address")))
        balance = self.balance_of(owner)
        if balance < amount:
            raise self._fail(
                operation, InsufficientBalance(revert_message("burn amount exceeds balance"))
            )

        self._total_supply -= amount
        self._update_balance(owner, balance - amount)
        return self._commit(operation, [Transfer(owner, ZERO_ADDRESS, amount)])

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _check_transfer(self, operation: str, sender: Address, recipient: Address, amount: int) -> None:
        if is_zero_address(sender):
            raise self._fail(operation, InvalidParty(revert_message("transfer from the zero address")))
        if is_zero_address(recipient):
            raise self._fail(operation, InvalidParty(revert_message("transfer to the zero address")))
        if self.balance_of(sender) < amount:
            raise self._fail(
                operation, InsufficientBalance(revert_message("transfer amount exceeds balance"))
            )

    def _check_approve(self, operation: str, owner: Address, spender: Address) -> None:
        if is_zero_address(owner):
            raise self._fail(operation, InvalidParty(revert_message("approve from the zero address")))
        if is_zero_address(spender):
            raise self._fail(operation, InvalidParty(revert_message("approve to the zero address")))

    def _update_balance(self, account: Address, balance: int) -> None:
        """
        Store a new balance and maintain the holder index.

        Zero balances are removed so the mapping only holds current holders.
        An account re-entering moves to the end of the holder order.
        """
        if balance:
            self.balances[account] = balance
        else:
            self.balances.pop(account, None)

    def _move(self, sender: Address, recipient: Address, amount: int) -> None:
        # Self-transfer: balance unchanged.
        if sender == recipient:
            return
        self._update_balance(sender, self.balance_of(sender) - amount)
        self._update_balance(recipient, self.balance_of(recipient) + amount)

    def _set_allowance(self, owner: Address, spender: Address, amount: int) -> None:
        if amount:
            self.allowances[(owner, spender)] = amount
        else:
            self.allowances.pop((owner, spender), None)

    def _commit(self, operation: str, events: List[Event]) -> Receipt:
        """
        Record a successful mutation and notify listeners.

        Args:
            operation: Name of the operation that was applied
            events: Events emitted by the operation, in order

        Returns:
            The Receipt appended to the receipt log
        """
        receipt = Receipt(
            operation=operation,
            events=tuple(events),
            sequence_number=self._next_sequence,
        )
        self._next_sequence += 1
        self.receipts.append(receipt)
        self.event_log.extend(receipt.events)

        if self.verbose:
            print(f"✓ APPLIED {receipt!r}")

        # Every listener sees every event; the first failure is raised afterwards.
        first_error: Optional[Exception] = None
        listeners = list(self._listeners)
        for event in receipt.events:
            for listener in listeners:
                try:
                    listener(event)
                except Exception as e:
                    if first_error is None:
                        first_error = e
        if first_error is not None:
            raise first_error
        return receipt

    def _fail(self, operation: str, error: LedgerError) -> LedgerError:
        """Report a rejected operation and return the error for the caller to raise."""
        if self.verbose:
            print(f"✗ REJECTED {operation}: {error}")
        return error

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> Ledger:
        """
        Create a deep copy of this ledger.

        All state is fully independent: modifications to the clone will not
        affect the original ledger, and vice versa.

        Cloned state includes:
        - Metadata
        - Balances (with holder order) and allowances
        - Receipt and event logs
        - Configuration (verbose)

        Listeners are not carried over.

        Returns:
            A new Ledger instance with identical state
        """
        cloned = Ledger.__new__(Ledger)
        cloned.metadata = self.metadata
        cloned.verbose = self.verbose
        cloned.balances = dict(self.balances)
        cloned.allowances = dict(self.allowances)
        cloned._total_supply = self._total_supply
        # Receipts and events are frozen, sharing them is safe
        cloned.receipts = list(self.receipts)
        cloned.event_log = list(self.event_log)
        cloned._listeners = []
        cloned._next_sequence = self._next_sequence
        return cloned
