from __future__ import annotations


class InstallerError(Exception):
    """Base class for failures that abort an install run."""

    returncode: int = 1

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        if returncode is not None:
            self.returncode = returncode


class TemplateNotFoundError(InstallerError, FileNotFoundError):
    pass


class InstallPermissionError(InstallerError, PermissionError):
    pass


class ServiceManagerUnavailableError(InstallerError):
    pass


class UnitActivationError(InstallerError):
    pass


class UserLookupError(InstallerError):
    pass


__all__ = [
    "InstallerError",
    "TemplateNotFoundError",
    "InstallPermissionError",
    "ServiceManagerUnavailableError",
    "UnitActivationError",
    "UserLookupError",
]
