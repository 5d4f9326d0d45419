"""Abstract base classes for OLT communication."""

from oltmgmt.onuquery.base.transport import BaseTransport

__all__ = [
    "BaseTransport",
]
