"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
import click
from functools import wraps

from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .output import emit_error

logger = logging.getLogger("newmac")


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Consistent error handling
    - CommandError subclasses exit with their own code
    - Errors are logged and emitted as a JSON object on stderr
    - Ctrl+C exits with 130
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            logger.error(str(e))
            emit_error(str(e), type=type(e).__name__, context={'exit_code': e.exit_code})
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            code = get_exit_code_for_exception(e)
            emit_error(str(e), type=type(e).__name__, context={'exit_code': code})
            sys.exit(code)

    return wrapper

