"""Fixtures compartidas: store en un directorio temporal y datos de prueba."""

from __future__ import annotations

import json

import pytest

from swotlink.database import DocumentStore

TECH = 1
HEALTHCARE = 2
SEED = 2
SERIES_B = 4


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
async def store(data_dir) -> DocumentStore:
    """Store inicializado (con seeds) sobre un directorio vacío."""
    store = DocumentStore(data_dir=data_dir, write_retry_attempts=1)
    await store.initialize()
    return store


@pytest.fixture
def make_user(store):
    async def _make(role: str, is_active: bool = True, **fields) -> dict:
        return await store.insert(
            "users",
            {
                "email": f"{role.lower()}{fields.pop('n', '')}@test.io",
                "first_name": fields.pop("first_name", role),
                "last_name": "Test",
                "role": role,
                "is_active": is_active,
                "is_verified": False,
                **fields,
            },
        )

    return _make


@pytest.fixture
async def marketplace(store, make_user):
    """
    Un inversor (Austin, Tech/Seed, 10k-100k) y tres startups:
    - A: match perfecto
    - B: otra industria/etapa y fuera de presupuesto
    - C: match, pero su usuario está inactivo
    """
    investor_user = await make_user("Investor", n=1)
    investor = await store.insert(
        "investor_profiles",
        {
            "user_id": investor_user["user_id"],
            "investor_name": "Lone Star Angels",
            "investor_type": "Angel",
            "budget_min": 10000,
            "budget_max": 100000,
            "location": "Austin, TX",
            "industries": json.dumps([TECH]),
            "funding_stages": json.dumps([SEED]),
        },
    )

    user_a = await make_user("Startup", n="a")
    startup_a = await store.insert(
        "startup_profiles",
        {
            "user_id": user_a["user_id"],
            "company_name": "Armadillo AI",
            "funding_goal": 50000,
            "industry_id": TECH,
            "funding_stage_id": SEED,
            "location": "Austin",
            "team_size": 4,
        },
    )

    user_b = await make_user("Startup", n="b")
    startup_b = await store.insert(
        "startup_profiles",
        {
            "user_id": user_b["user_id"],
            "company_name": "Bluebonnet Health",
            "funding_goal": 500000,
            "industry_id": HEALTHCARE,
            "funding_stage_id": SERIES_B,
            "team_size": 25,
        },
    )

    user_c = await make_user("Startup", is_active=False, n="c")
    startup_c = await store.insert(
        "startup_profiles",
        {
            "user_id": user_c["user_id"],
            "company_name": "Cedar Labs",
            "funding_goal": 60000,
            "industry_id": TECH,
            "funding_stage_id": SEED,
            "location": "Austin",
        },
    )

    return {
        "investor_user": investor_user,
        "investor": investor,
        "user_a": user_a,
        "startup_a": startup_a,
        "user_b": user_b,
        "startup_b": startup_b,
        "user_c": user_c,
        "startup_c": startup_c,
    }
