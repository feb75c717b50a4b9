"""
Dependencies module - Shared FastAPI dependencies.

Provides:
- The application-wide DataSet client
"""

from .client import get_dataset_client

__all__ = [
    "get_dataset_client"
]
