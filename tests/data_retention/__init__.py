"""
Tests for the Data Retention package.

- Retention window arithmetic
- Store purge and boundary behaviour
"""
