"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Sum of balances equals total supply
2. atomicity.py - Failed operations leave no trace
3. allowances.py - Replace vs. accumulate, unlimited allowance sentinel

These tests use hypothesis for property-based testing.
"""
