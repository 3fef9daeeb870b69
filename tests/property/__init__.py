"""Property-based tests using Hypothesis.

These tests use generative testing to explore edge cases:
- Cleaning idempotence on arbitrary spam-shaped text
- Invisible character removal
- Blank-run limits

To run property tests:
    pytest tests/property/ -v --hypothesis-show-statistics

Requires:
    hypothesis>=6.90
"""
