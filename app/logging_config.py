import logging
import sys
from typing import Optional

from .settings import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stdout handler to the root logger and set levels.

    Parameters
    ----------
    level : Optional[str]
        Level for the `app` loggers. Defaults to `settings.log_level`.

    Notes
    -----
    - Calling it again does not add a second handler.
    - `httpx` request logging is reduced to warnings.
    """

    app_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)

    logging.getLogger("app").setLevel(app_level)
    logging.getLogger("httpx").setLevel(logging.WARNING)
