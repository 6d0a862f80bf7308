# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the report pipeline.

This module defines the exception hierarchy for report operations:
- ReportServiceError: Base exception for all report errors
- TemplateNotFoundError: A document template cannot be loaded (fatal)
- UnknownReportTypeError: The requested report type has no renderer
- InvalidRowKeyError: A row key does not follow the wire format
"""


class ReportServiceError(Exception):
    """Base exception for all report errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize report error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class TemplateNotFoundError(ReportServiceError):
    """A referenced document template is missing or invalid.

    This is a configuration error; the export is aborted.

    Attributes:
        template_id: Identifier of the template that failed to load.
    """

    def __init__(self, template_id: str, reason: str | None = None):
        """Initialize template error.

        Args:
            template_id: Identifier of the template that failed to load.
            reason: Optional description of the load failure.
        """
        self.template_id = template_id
        details = {"template_id": template_id}
        if reason:
            details["reason"] = reason
        super().__init__(f"Template '{template_id}' could not be loaded", details)


class UnknownReportTypeError(ReportServiceError):
    """Raised when no renderer is registered for a report type."""

    def __init__(self, report_type: str):
        self.report_type = report_type
        super().__init__(f"Unknown report type '{report_type}'", {"report_type": report_type})


class InvalidRowKeyError(ReportServiceError):
    """Raised when a row key cannot be parsed."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Invalid row key '{key}'", {"key": key})
