"""
iniconf kernel

Shared foundation for the iniconf packages:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Field naming conventions
"""

__version__ = "0.1.0"
