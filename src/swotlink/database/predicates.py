"""
Predicados para seleccionar registros de una colección.

Dos variantes explícitas:
- Where: igualdad campo a campo (AND)
- Satisfies: función arbitraria que devuelve bool
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union

_MISSING = object()

@dataclass(frozen=True)
class Where:
    """Matchea registros cuyos campos son iguales a los esperados."""

    fields: Mapping[str, Any] = field(default_factory=dict)

    def matches(self, record: dict) -> bool:
        # Un campo ausente no matchea nunca, ni siquiera contra None
        return all(
            record.get(key, _MISSING) == value
            for key, value in self.fields.items()
        )


@dataclass(frozen=True)
class Satisfies:
    """Matchea registros para los que la función devuelve True."""

    fn: Callable[[dict], bool]

    def matches(self, record: dict) -> bool:
        return bool(self.fn(record))


Predicate = Union[Where, Satisfies]


def where(**fields: Any) -> Where:
    """Atajo: where(user_id=3, is_active=True)."""
    return Where(fields)


def satisfies(fn: Callable[[dict], bool]) -> Satisfies:
    """Atajo para predicados función."""
    return Satisfies(fn)


def select(records: list[dict], predicate: Predicate | None) -> list[dict]:
    """Filtra registros; sin predicado devuelve todos."""
    if predicate is None:
        return list(records)
    return [r for r in records if predicate.matches(r)]
