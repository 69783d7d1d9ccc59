"""NYC Jobs EDA Test Suite.

Test Structure:
- unit/: Unit tests for individual functions and classes, one folder per stage
"""
