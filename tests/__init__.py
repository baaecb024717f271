"""
Gatehouse test suite.

This package contains tests for:
- Value types and exceptions
- Entity policies
- Policy registry resolution
- Startup wiring and discovery
- The AccessControl facade and decorators
- The composition root
"""
