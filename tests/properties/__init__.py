"""
Property-based testing using Hypothesis.

This package contains property tests that verify mathematical invariants
hold across randomly generated inputs. These tests are more comprehensive
than parameterized tests because they explore the full input space.

Modules:
    test_rate_properties: Conversion round trips and rate ordering
    test_annuity_properties: Timing identities, degeneracies, solver recovery
    test_schedule_properties: Amortization closure and balance bounds
    test_bond_properties: Price monotonicity, classification, perpetuity bounds
"""
