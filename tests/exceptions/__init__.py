"""
Exception handling tests.

Tests for cdk.exceptions:
- Native error variant to Python exception mapping
- Domain errors versus bridge faults
- Errors raised on native threads

Maps to: cdk/exceptions/
"""
