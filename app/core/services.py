"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business workflows separate from models.
    Models own their invariants, services orchestrate and report.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, business rules)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class OrderService(BaseService):
        @classmethod
        def create_order(cls, total_in_cents: int) -> ServiceResult[Order]:
            if total_in_cents <= 0:
                return ServiceResult.failure(
                    "Order total must be positive",
                    error_code="INVALID_TOTAL",
                )

            with cls.atomic():
                order = Order.objects.create(total_in_cents=total_in_cents)

            cls.get_logger().info(f"Created order {order.id}")
            return ServiceResult.success(order)

    result = OrderService.create_order(16000)
    if result.success:
        order = result.data
    else:
        print(f"Error: {result.error} ({result.error_code})")

Related:
    - core.exceptions: For domain errors raised by models
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for caller handling
        details: Extra context about the failure (amounts, identifiers)

    Usage:
        # Success case
        return ServiceResult.success(refund)

        # Failure case
        return ServiceResult.failure("Order is required", "ORDER_REQUIRED")

        # Failure carrying a domain exception's code and details
        except OverRefundError as e:
            return ServiceResult.from_exception(e)
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for caller handling
            details: Additional failure context

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "Order total must be positive",
                error_code="INVALID_TOTAL",
                details={"total_in_cents": 0},
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            details=details or {},
        )

    @classmethod
    def from_exception(
        cls, exc: Exception, error_code: str | None = None
    ) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own message, code and details.
        Other exceptions fall back to the class name as error code.

        Args:
            exc: The caught exception
            error_code: Optional error code override

        Returns:
            ServiceResult with error details from exception
        """
        if isinstance(exc, BaseApplicationError):
            return cls.failure(
                exc.message,
                error_code=error_code or exc.error_code,
                details=dict(exc.details),
            )
        return cls.failure(
            str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to a plain dictionary.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        result: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            result["error_code"] = self.error_code
        if self.details:
            result["details"] = self.details
        return result

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            result = RefundService.request_refund(order.id, 400)
            if result:  # Same as: if result.success
                print("Refunded!")
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception handling patterns

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.

        Returns:
            Logger instance for this service
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Note:
            This is a thin wrapper around Django's transaction.atomic().
            Use it to make transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.WARNING,
        extra: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """
        Convert an expected exception to a ServiceResult with logging.

        Args:
            exc: The caught exception
            context: Additional context for the log message
            log_level: Logging level (default WARNING)
            extra: Structured logging context

        Returns:
            ServiceResult with error details

        Example:
            try:
                order.refund(amount_in_cents)
            except OverRefundError as e:
                return cls.handle_exception(e, "refund admission")
        """
        message = f"{context}: {exc}" if context else str(exc)
        cls.get_logger().log(log_level, message, extra=extra or {})
        return ServiceResult.from_exception(exc)
