"""
Score de compatibilidad startup <-> inversor.

Suma ponderada de cuatro dimensiones independientes, normalizada a 0-100:

    industria  40  el industry_id de la startup está en las preferencias
    etapa      30  el funding_stage_id está en las preferencias
    budget     30  el funding goal cae en [budget_min, budget_max]
    ubicación  10  los textos de ubicación comparten algún token

El denominador es siempre 110: una dimensión sin datos suma 0 pero sigue
contando. La leniencia de "sin preferencia = match" vive en los filtros
del engine, no acá.
"""

import json
import math
import re
from typing import Any, Iterable, Optional

import structlog

logger = structlog.get_logger()

INDUSTRY_WEIGHT = 40
STAGE_WEIGHT = 30
BUDGET_WEIGHT = 30
LOCATION_WEIGHT = 10

MAX_SCORE = INDUSTRY_WEIGHT + STAGE_WEIGHT + BUDGET_WEIGHT + LOCATION_WEIGHT

# Tope del crédito parcial cuando el goal supera el máximo del inversor
OVER_BUDGET_CAP = 15

_LOCATION_SEPARATORS = re.compile(r"[,\s]+")


def to_number(value: Any) -> Optional[float]:
    """Convierte a float; None si no es numérico."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def tokenize_location(text: Optional[str]) -> set[str]:
    """Tokens en minúscula separados por comas o espacios."""
    if not text:
        return set()
    return {t for t in _LOCATION_SEPARATORS.split(str(text).lower()) if t}


def parse_preferences(value: Any, key: str) -> set[int]:
    """
    Parsea una lista de preferencias guardada.

    Acepta una lista o un string JSON con una lista. Cada item puede ser
    un ID o un objeto con el ID en `key` (formato legacy, p.ej.
    {"industry_id": 3}). Datos malformados equivalen a "sin preferencia".

    Returns:
        Set de IDs (vacío = sin preferencia)
    """
    if not value:
        return set()

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Preferencias malformadas", key=key, raw=value[:100])
            return set()

    if not isinstance(value, list):
        logger.warning("Preferencias no son una lista", key=key, type=type(value).__name__)
        return set()

    ids = set()
    for item in value:
        if isinstance(item, dict):
            item = item.get(key)
        number = to_number(item)
        if number is None:
            logger.warning("Item de preferencia inválido", key=key, item=item)
            continue
        ids.add(int(number))
    return ids


def industry_points(startup: dict, investor_industries: Iterable[int]) -> int:
    industry_id = startup.get("industry_id")
    if industry_id and industry_id in set(investor_industries):
        return INDUSTRY_WEIGHT
    return 0


def stage_points(startup: dict, investor_stages: Iterable[int]) -> int:
    stage_id = startup.get("funding_stage_id")
    if stage_id and stage_id in set(investor_stages):
        return STAGE_WEIGHT
    return 0


def budget_points(funding_goal: Any, budget_min: Any, budget_max: Any) -> int:
    """
    Puntos de budget para un goal G y un rango [min, max].

    - min <= G <= max: puntaje completo
    - G < min: proporcional a G/min
    - G > max: proporcional a max/G, con tope en la mitad
    - si falta (o es 0) cualquiera de los tres: 0
    """
    goal = to_number(funding_goal)
    low = to_number(budget_min)
    high = to_number(budget_max)
    if not goal or not low or not high:
        return 0

    if low <= goal <= high:
        return BUDGET_WEIGHT
    if goal < low:
        return max(0, min(BUDGET_WEIGHT, math.floor(BUDGET_WEIGHT * goal / low)))
    return max(0, min(OVER_BUDGET_CAP, math.floor(OVER_BUDGET_CAP * high / goal)))


def location_points(startup_location: Optional[str], investor_location: Optional[str]) -> int:
    startup_tokens = tokenize_location(startup_location)
    investor_tokens = tokenize_location(investor_location)
    if startup_tokens & investor_tokens:
        return LOCATION_WEIGHT
    return 0


def score(
    startup: dict,
    investor: dict,
    investor_industries: Iterable[int],
    investor_stages: Iterable[int],
) -> int:
    """
    Calcula el score de compatibilidad.

    Args:
        startup: Registro de startup_profiles
        investor: Registro de investor_profiles
        investor_industries: IDs de industrias preferidas (ya parseados)
        investor_stages: IDs de etapas preferidas (ya parseados)

    Returns:
        Entero entre 0 y 100
    """
    earned = (
        industry_points(startup, investor_industries)
        + stage_points(startup, investor_stages)
        + budget_points(
            startup.get("funding_goal"),
            investor.get("budget_min"),
            investor.get("budget_max"),
        )
        + location_points(startup.get("location"), investor.get("location"))
    )
    # Redondeo half-up
    return math.floor(100 * earned / MAX_SCORE + 0.5)
