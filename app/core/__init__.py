"""
Core package with shared infrastructure for domain apps.

Services (import from core.services):
    - BaseService: Logger and transaction helpers for service classes
    - ServiceResult: Success/failure wrapper for expected outcomes

Exceptions (import from core.exceptions):
    - BaseApplicationError, ValidationError, NotFoundError, ConflictError

Models (import directly, they need the app registry):
    - core.models.BaseModel
    - core.model_mixins.UUIDPrimaryKeyMixin

Usage:
    from core.services import BaseService, ServiceResult
    from core.exceptions import ValidationError, NotFoundError
    from core.models import BaseModel
    from core.model_mixins import UUIDPrimaryKeyMixin

Note:
    Models and model mixins are NOT imported here to avoid AppRegistryNotReady
    errors. Import them directly from their modules.
"""

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
]
