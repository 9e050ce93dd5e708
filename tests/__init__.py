# Star Registry Test Suite
"""
Test suite including:
- Unit tests
- Integration tests
- Security tests (invalid inputs, tampering)

Run with: pytest
"""
