"""Internal logging setup for emfkit.

Library modules log through ``logging.getLogger(__name__)`` and never touch
the root logger. Debug output can be switched on for troubleshooting.
"""

import logging

LOGGER_NAME = "emfkit"

_DEBUG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


class _DebugHandler(logging.StreamHandler):
    """Stderr handler installed by configure_debug_logging()."""


def configure_debug_logging(enabled: bool) -> logging.Logger:
    """Enable or disable debug output for the emfkit logger hierarchy.

    Calling this repeatedly never installs more than one handler.

    Args:
        enabled: True to log DEBUG records to stderr, False to remove the
            handler and restore the default level.

    Returns:
        The ``emfkit`` logger.
    """
    library_logger = logging.getLogger(LOGGER_NAME)
    existing = [h for h in library_logger.handlers if isinstance(h, _DebugHandler)]

    if not enabled:
        for handler in existing:
            library_logger.removeHandler(handler)
        library_logger.setLevel(logging.NOTSET)
        return library_logger

    if not existing:
        handler = _DebugHandler()
        handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
        library_logger.addHandler(handler)
    library_logger.setLevel(logging.DEBUG)
    return library_logger
