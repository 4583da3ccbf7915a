import logging
from typing import Optional

DEFAULT_FORMAT = '%(levelname)s:%(name)s:%(message)s'


def level_for(verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(level: int = logging.INFO, fmt: Optional[str] = None) -> None:
    if fmt is None:
        fmt = DEFAULT_FORMAT
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    root.setLevel(level)


__all__ = ["DEFAULT_FORMAT", "level_for", "configure_logging"]
