"""Test suite for finsync.

Test structure follows the test pyramid:
- unit/: Unit tests - domain logic, services and adapters in isolation
- integration/: Integration tests - SQLAlchemy store against a real database
"""
