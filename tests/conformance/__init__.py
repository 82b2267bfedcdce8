"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the replay engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_balance_invariant.py - total == available + held after every event
2. test_locking.py - locked is one-way
3. test_idempotency.py - repeated resolve/chargeback have no further effect
4. test_determinism.py - same stream, same final state

These tests use hypothesis for property-based testing.
"""
