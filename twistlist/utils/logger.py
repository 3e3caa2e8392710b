import logging
import sys

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_ROOT_NAME = "twistlist"
_configured = False


def _configure_root():
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(logging.INFO)
    root.addHandler(handler)
    _configured = True


def set_log_level(level: str):
    """
    Applies the configured level (e.g. settings.LOG_LEVEL) to all application loggers.
    """
    _configure_root()
    logging.getLogger(_ROOT_NAME).setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger under the application namespace.
    The handler is attached once, on first use.
    """
    _configure_root()
    if not name.startswith(_ROOT_NAME):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)
