"""
Standard exit codes for newmac.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
PACKAGE_MANAGER_ERROR = 64   # Homebrew could not be installed or updated
PACKAGE_INSTALL_ERROR = 65   # A formula or cask failed to install
CLONE_ERROR = 66             # Dotfiles repository clone failed
DIRECTORY_ERROR = 67         # A required directory is missing or unusable
SYMLINK_ERROR = 68           # stow failed to link a package
KEYGEN_ERROR = 69            # ssh-keygen failed
CONFIG_ERROR = 70            # Configuration file error
INTERRUPTED = 130            # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': DIRECTORY_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that steps can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class PackageManagerError(CommandError):
    """Raised when Homebrew cannot be installed, activated or updated."""
    def __init__(self, message: str):
        super().__init__(message, PACKAGE_MANAGER_ERROR)


class PackageInstallError(CommandError):
    """Raised when a single formula or cask fails to install."""
    def __init__(self, package: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to install {package}", PACKAGE_INSTALL_ERROR)
        self.package = package


class CleanupError(CommandError):
    """Raised when `brew cleanup` fails. Never fatal."""
    def __init__(self, message: str = "Failed to cleanup Homebrew"):
        super().__init__(message, GENERAL_ERROR)


class CloneError(CommandError):
    """Raised when the dotfiles repository cannot be cloned."""
    def __init__(self, message: str):
        super().__init__(message, CLONE_ERROR)


class DirectoryError(CommandError):
    """Raised when a directory cannot be created or entered."""
    def __init__(self, message: str):
        super().__init__(message, DIRECTORY_ERROR)


class SymlinkError(CommandError):
    """Raised when stow fails for a package."""
    def __init__(self, package: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to stow {package}", SYMLINK_ERROR)
        self.package = package


class KeygenError(CommandError):
    """Raised when the SSH key cannot be generated."""
    def __init__(self, message: str):
        super().__init__(message, KEYGEN_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class DownloadError(CommandError):
    """Raised when an HTTP download fails."""
    def __init__(self, url: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to download {url}", GENERAL_ERROR)
        self.url = url


class PreferencesError(CommandError):
    """Raised when a preference import cannot complete. Never fatal."""
    def __init__(self, message: str):
        super().__init__(message, GENERAL_ERROR)


class AppInstallError(CommandError):
    """Raised when a .dmg application cannot be installed. Never fatal."""
    def __init__(self, app: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to install {app}", GENERAL_ERROR)
        self.app = app
