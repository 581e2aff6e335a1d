"""
Script para inicializar el directorio de datos.

Crea los archivos de todas las colecciones y siembra las tablas de
referencia. Es seguro correrlo en cada arranque.

Uso:
    python -m swotlink.scripts.init_storage
    python -m swotlink.scripts.init_storage --data-dir /var/lib/swotlink
"""

import argparse
import asyncio
import logging
import sys

import structlog

from swotlink.config import get_settings
from swotlink.database import DocumentStore

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Inicializa el almacenamiento JSON")
    parser.add_argument(
        "--data-dir",
        default=None,
        help=f"Directorio de datos (default: {settings.data_dir})",
    )
    args = parser.parse_args()

    store = DocumentStore(data_dir=args.data_dir)

    try:
        asyncio.run(store.initialize())
    except OSError as e:
        logger.error("No se pudo crear el directorio de datos", error=str(e))
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
