"""
Exception hierarchy for the repository API.

Every error raised while handling a request derives from BazaptaError and
carries the HTTP status it is reported with. The message is sent verbatim
as the plain-text response body.
"""

from __future__ import annotations

from typing import Optional


class BazaptaError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# Routing errors


class UnsupportedDistribution(BazaptaError):
    status_code = 404

    def __init__(self, distribution: str):
        super().__init__(f"unsupported distribution: '{distribution}'")
        self.distribution = distribution


class MethodNotAllowed(BazaptaError):
    status_code = 405

    def __init__(self, method: str):
        super().__init__(f"method not allowed: {method}")
        self.method = method


class ResourceNotFound(BazaptaError):
    status_code = 404


# Grammar errors


class MalformedListLine(BazaptaError):
    def __init__(self, line: str):
        super().__init__(f"malformed listing line: {line!r}")
        self.line = line


# Repository tool errors


class ToolFailure(BazaptaError):
    """The repository tool exited non-zero or could not be launched."""

    def __init__(self, command, output: str, status: int):
        super().__init__(f"'{' '.join(command)}' failed with status {status}: {output.strip()}")
        self.command = list(command)
        self.output = output
        self.status = status


class PackageRejected(BazaptaError):
    """The repository tool refused a package while still exiting with status 0."""


class PackageNotFound(BazaptaError):
    status_code = 404


# Staging and startup errors


class StagingError(BazaptaError):
    status_code = 400


class PreflightError(BazaptaError):
    pass
