"""
Example: Issuing a token and spending it through an allowance.

This example walks through the life of a single token: construction with an
initial supply, direct transfers, delegated spending with a finite and an
unlimited allowance, minting and burning, and the event stream observed by
a subscribed listener.
"""

from token_ledger import (
    Ledger, LedgerError, UNLIMITED_ALLOWANCE, ZERO_ADDRESS,
)

TREASURY = "0x1111111111111111111111111111111111111111"
EXCHANGE = "0x2222222222222222222222222222222222222222"
INVESTOR = "0x3333333333333333333333333333333333333333"


def show_balances(token):
    for holder in token.holders():
        print(f"  {holder}: {token.balance_of(holder):,}")
    print(f"  total supply: {token.total_supply():,}")


def main():
    print("=" * 80)
    print("TOKEN LEDGER - Issuance, Transfers and Allowances")
    print("=" * 80)
    print()

    token = Ledger("My Token", "MTKN", TREASURY, 1_000_000, verbose=True)
    seen = []
    token.subscribe(seen.append)

    print()
    print("Example 1: Direct Transfer")
    print("-" * 80)
    print("The treasury sends 250,000 tokens to an investor.")
    print()

    token.transfer(TREASURY, INVESTOR, 250_000)

    print()
    show_balances(token)
    print()

    print("Example 2: Delegated Spending")
    print("-" * 80)
    print("The investor lets the exchange move up to 100,000 tokens.")
    print("The exchange pulls 40,000 into the treasury; the allowance drops to 60,000.")
    print()

    token.approve(INVESTOR, EXCHANGE, 100_000)
    token.transfer_from(INVESTOR, EXCHANGE, TREASURY, 40_000)

    print()
    print(f"Remaining allowance: {token.allowance(INVESTOR, EXCHANGE):,}")
    print()

    print("Example 3: Rejected Operations")
    print("-" * 80)
    print("Spending above the allowance and transferring to the zero address both fail")
    print("without changing any state.")
    print()

    for attempt in (
        lambda: token.transfer_from(INVESTOR, EXCHANGE, TREASURY, 60_001),
        lambda: token.transfer(TREASURY, ZERO_ADDRESS, 1),
    ):
        try:
            attempt()
        except LedgerError as e:
            print(f"  caught {type(e).__name__}: {e}")

    print()
    show_balances(token)
    print()

    print("Example 4: Unlimited Allowance")
    print("-" * 80)
    print("The treasury grants the exchange an unlimited allowance. Spending from it")
    print("never decrements it and emits no Approval event.")
    print()

    token.approve(TREASURY, EXCHANGE, UNLIMITED_ALLOWANCE)
    receipt = token.transfer_from(TREASURY, EXCHANGE, INVESTOR, 10_000)

    print()
    print(f"Events in receipt: {list(receipt.events)}")
    print(f"Allowance still unlimited: {token.allowance(TREASURY, EXCHANGE) == UNLIMITED_ALLOWANCE}")
    print()

    print("Example 5: Mint and Burn")
    print("-" * 80)
    print("New tokens are minted to the exchange and the investor burns part of its holding.")
    print()

    token.mint(EXCHANGE, 5_000)
    token.burn(INVESTOR, 20_000)

    print()
    show_balances(token)
    result = token.verify_supply()
    print(f"  supply invariant holds: {result['valid']}")
    print()

    print("=" * 80)
    print("EVENT STREAM")
    print("=" * 80)
    print()
    for event in seen:
        print(f"  {event!r}")
    print()


if __name__ == "__main__":
    main()
