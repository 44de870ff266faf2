from __future__ import annotations

import logging

PACKAGE_LOGGER = "hostprep_cli"


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s" if verbose else "%(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt)

    # set even when the root logger is already configured
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    # the gpg key download is the only http traffic
    logging.getLogger("httpx").setLevel(level)
    logging.getLogger("httpcore").setLevel(level)
