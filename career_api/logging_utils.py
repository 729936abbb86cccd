import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stdout handler to the root logger.

    Safe to call more than once; the handler is only added the first time.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if any(getattr(h, "_career_api", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler._career_api = True
    root.addHandler(handler)
