import sys
from typing import Literal
from loguru import logger

# Global namespace for all loggers
BASE_LOGGER_NAMESPACE = "tool_filter"

# Initialization guard to prevent duplicate configuration
_configured = False


def get_logger(name: str) -> "logger":
    """
    Returns a loguru logger bound with the given component name.

    Example: get_logger("ToolRegistry") → logger with module="tool_filter.ToolRegistry"

    Note: loguru uses a single global logger; binding adds contextual
    information without creating separate logger instances.
    """
    return logger.bind(module=f"{BASE_LOGGER_NAMESPACE}.{name}")


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
) -> None:
    """
    Configures loguru globally for the CLI.

    Library users are expected to configure loguru themselves; this is only
    called from main.py. Subsequent calls are no-ops.

    Args:
        level: Logging level as a string.
    """
    global _configured
    if _configured:
        return

    # Unbound records fall back to the base namespace
    logger.configure(extra={"module": BASE_LOGGER_NAMESPACE})
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <cyan>{extra[module]}</cyan> | {message}",
        level=level,
        colorize=True,
    )

    _configured = True
