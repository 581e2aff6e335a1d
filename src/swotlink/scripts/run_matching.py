"""
Script para consultar matches de un usuario.

Imprime como JSON los candidatos rankeados (o las estadísticas) de un
usuario según su rol.

Uso:
    python -m swotlink.scripts.run_matching --user-id 2 --role Investor
    python -m swotlink.scripts.run_matching --user-id 1 --role Startup --show-all
    python -m swotlink.scripts.run_matching --user-id 2 --role Investor --stats
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

import structlog

from swotlink.config import ROLE_INVESTOR, ROLES, get_settings
from swotlink.database import get_document_store
from swotlink.exceptions import ProfileNotFoundError
from swotlink.matching import MatchingEngine
from swotlink.models import InvestorFilters, StartupFilters

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    stream=sys.stderr,
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


async def run_matching(args: argparse.Namespace):
    """Ejecuta la consulta de matching pedida."""
    store = get_document_store()
    await store.initialize()
    engine = MatchingEngine(store)

    if args.stats:
        return asdict(await engine.match_stats(args.user_id, args.role))

    if args.role == ROLE_INVESTOR:
        filters = StartupFilters(
            ignore_industry=args.ignore_industry,
            ignore_stage=args.ignore_stage,
            limit=args.limit,
        )
        return await engine.matching_startups_for(args.user_id, filters)

    filters = InvestorFilters(
        ignore_industry=args.ignore_industry,
        ignore_stage=args.ignore_stage,
        show_all=args.show_all,
        limit=args.limit,
    )
    return await engine.matching_investors_for(args.user_id, filters)


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Consulta los matches de un usuario")
    parser.add_argument("--user-id", type=int, required=True, help="user_id a consultar")
    parser.add_argument("--role", required=True, choices=ROLES, help="Rol del usuario")
    parser.add_argument("--limit", type=int, default=None, help="Máximo de resultados")
    parser.add_argument("--ignore-industry", action="store_true")
    parser.add_argument("--ignore-stage", action="store_true")
    parser.add_argument(
        "--show-all",
        action="store_true",
        help="(Startup) incluir inversores sin match de preferencias",
    )
    parser.add_argument("--stats", action="store_true", help="Solo estadísticas")
    args = parser.parse_args()

    logger.info("Consultando matches", user_id=args.user_id, role=args.role)

    try:
        result = asyncio.run(run_matching(args))
    except ProfileNotFoundError as e:
        logger.error("Perfil inexistente", error=str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Consulta interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en matching", error=str(e))
        sys.exit(1)

    print(json.dumps(result, ensure_ascii=False, indent=2))
    sys.exit(0)


if __name__ == "__main__":
    main()
