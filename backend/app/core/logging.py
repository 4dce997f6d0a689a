import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the root logger once, at application start."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_careerguard", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._careerguard = True  # type: ignore[attr-defined]
        root.addHandler(handler)