"""
Módulo de base de datos.

Provee el document store sobre archivos JSON y los repositorios CRUD.
"""

from swotlink.database.file_storage import (
    COLLECTIONS,
    DocumentStore,
    get_document_store,
)
from swotlink.database.predicates import Predicate, Satisfies, Where, satisfies, where
from swotlink.database.repositories import (
    UserRepository,
    StartupProfileRepository,
    InvestorProfileRepository,
    LookupRepository,
    SavedMatchRepository,
)

__all__ = [
    "COLLECTIONS",
    "DocumentStore",
    "get_document_store",
    "Predicate",
    "Where",
    "Satisfies",
    "where",
    "satisfies",
    "UserRepository",
    "StartupProfileRepository",
    "InvestorProfileRepository",
    "LookupRepository",
    "SavedMatchRepository",
]
