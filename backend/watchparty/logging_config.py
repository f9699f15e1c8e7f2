import logging
import sys


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level_name: str = "INFO") -> None:
    """Configure process-wide logging.

    - Root logger level from ``level_name`` (falls back to INFO)
    - Logs go to stdout
    - Socket.IO / Engine.IO packet chatter is kept at WARNING
    """
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)

    # If logging is already configured (e.g. by pytest or a WSGI server), don't re-add handlers
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
