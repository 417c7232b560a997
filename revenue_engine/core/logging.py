"""Logging setup for processes embedding the reporting engine."""
from __future__ import annotations

import logging.config
from pathlib import Path

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"
PACKAGE_LOGGER = "revenue_engine"


def configure_logging(config_path: str | Path | None = None, *, level: str | None = None) -> None:
    """Configure logging from YAML, falling back to ``basicConfig`` when the file is absent.

    ``level`` overrides the level of the ``revenue_engine`` logger tree only.
    """

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if path.exists():
        import yaml  # type: ignore[import-untyped]

        with path.open("r", encoding="utf-8") as config_file:
            logging.config.dictConfig(yaml.safe_load(config_file))
    else:
        logging.basicConfig(level=logging.INFO)

    if level:
        logging.getLogger(PACKAGE_LOGGER).setLevel(level.upper())


__all__ = ["DEFAULT_CONFIG_PATH", "configure_logging"]
