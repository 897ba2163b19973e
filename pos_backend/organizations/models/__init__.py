# organizations/models/__init__.py

from .organization import Organization
from .branch import Branch

__all__ = ["Organization", "Branch"]
