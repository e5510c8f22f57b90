"""Logging setup shared by the CLI and application entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once.

    Resolution decisions are logged at DEBUG by ``longbox.domain.resolution``;
    pass ``level=logging.DEBUG`` to see why each field won. ``force=True``
    reconfigures handlers that are already installed (useful in tests).
    """

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
