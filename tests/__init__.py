"""
Test suite for oft-engine

Contains:
- tests/conftest.py : in-memory messaging channel and composer registry
- tests/unit/       : unit tests per module and end-to-end engine flows
"""
