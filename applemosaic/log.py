import logging


def setup_default_logging(level="INFO"):
    """
    Apply a minimal logging configuration once.

    Does nothing when the root logger already has handlers, so an
    embedding application keeps its own configuration.
    """
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
