"""
Accountwork errors.
"""

class AccountworkError(Exception):
    """Base exception for all Accountwork errors."""
    pass

class InvalidAccountSpecError(AccountworkError, ValueError):
    """Account attributes that cannot be rendered into a command."""
    pass

class ConfigurationError(AccountworkError):
    """Errors in configuration."""
    pass
