"""Root logger configuration for the service and CLI."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
    # Per-request transport logs are noisy at INFO.
    for name in ("httpx", "urllib3", "web3"):
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))
