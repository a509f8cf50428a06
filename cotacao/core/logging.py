"""Configuração do loguru compartilhada pelo servidor e pelo cliente."""
from __future__ import annotations

import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    # Um único sink em stdout para que servidor e cliente mostrem progresso/erros.
    logger.remove()
    logger.add(sys.stdout, level=level.upper())
