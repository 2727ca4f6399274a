import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Attach a stdout handler to the ``app`` logger tree (once)."""
    root = logging.getLogger("app")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s  [%(levelname)s]  %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(level)
