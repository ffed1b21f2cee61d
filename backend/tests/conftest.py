"""Shared fixtures for the Boot Room test suite.

Matching tests build catalogs from plain BootRecord objects. API tests run
the FastAPI app against an in-memory FakeSession instead of Postgres.
"""

import sys
import uuid
from datetime import datetime
from pathlib import Path

import pytest

# Ensure backend is importable
BACKEND_DIR = Path(__file__).resolve().parent.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.schemas.quiz import QuizAnswers
from app.services.fit_profile import BootType, Gender, ToeShape, Volume
from app.services.matching import BootRecord


# =============================================================================
# CATALOG FIXTURES
# =============================================================================

_boot_counter = 0


def make_boot(**overrides) -> BootRecord:
    """A Male 100-flex, 100mm, all-Medium boot unless overridden."""
    global _boot_counter
    _boot_counter += 1

    data = dict(
        id=f"boot-{_boot_counter}",
        gender=Gender.MALE,
        brand="Atomic",
        model=f"Model {_boot_counter}",
        flex=100,
        last_width_mm=100,
        toe_box_shape=ToeShape.ROUND,
        instep_height=Volume.MEDIUM,
        ankle_volume=Volume.MEDIUM,
        calf_volume=Volume.MEDIUM,
        boot_type=BootType.STANDARD,
    )
    data.update(overrides)
    return BootRecord(**data)


def make_answers(**overrides) -> QuizAnswers:
    """Male intermediate, 80kg, 100mm feet, all-Medium volumes unless overridden."""
    data = {
        "gender": "Male",
        "ability": "Intermediate",
        "weight_kg": 80,
        "foot_length_mm": {"left": 265, "right": 265},
        "foot_width": {"left": 100, "right": 100},
        "toe_shape": "Round",
        "instep_height": "Medium",
        "ankle_volume": "Medium",
        "calf_volume": "Medium",
        "features": [],
    }
    data.update(overrides)
    return QuizAnswers.model_validate(data)


@pytest.fixture
def boot_factory():
    return make_boot


@pytest.fixture
def answers_factory():
    return make_answers


@pytest.fixture
def mixed_catalog():
    """Male intermediate catalog across four brands."""
    return [
        make_boot(id="atomic-1", brand="Atomic", model="Hawx 100", flex=100, last_width_mm=100),
        make_boot(id="atomic-2", brand="Atomic", model="Hawx 110", flex=110, last_width_mm=100),
        make_boot(id="lange-1", brand="Lange", model="LX 110", flex=110, last_width_mm=101),
        make_boot(id="salomon-1", brand="Salomon", model="Alpha 100", flex=100, last_width_mm=100,
                  toe_box_shape=ToeShape.SQUARE),
        make_boot(id="tecnica-1", brand="Tecnica", model="Mach1 100", flex=100, last_width_mm=102),
        make_boot(id="women-1", brand="Lange", model="RX 100 W", gender=Gender.FEMALE, flex=100),
        make_boot(id="stiff-1", brand="Head", model="Raptor 140", flex=140, last_width_mm=100),
    ]


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

_TIMESTAMP_FIELDS = ("started_at", "created_at", "updated_at", "generated_at", "timestamp")


class FakeResult:
    def __init__(self, rows=None, scalar=None):
        self._rows = list(rows or [])
        self._scalar = scalar

    def scalars(self):
        return self

    def all(self):
        return list(self._rows)

    def first(self):
        return self._rows[0] if self._rows else None

    def scalar_one_or_none(self):
        return self._rows[0] if self._rows else None

    def scalar(self):
        return self._scalar


class FakeSession:
    """Async session stand-in.

    get/add/delete work against an in-memory store keyed by (model, id);
    execute returns queued FakeResults in order, then empty results.
    """

    def __init__(self):
        self.store = {}
        self.added = []
        self.deleted = []
        self.results = []
        self.commits = 0
        self.fail_commit = False

    def queue(self, *results):
        self.results.extend(results)

    async def get(self, model, ident):
        return self.store.get((model, ident))

    def add(self, obj):
        if getattr(obj, "id", None) is None:
            obj.id = uuid.uuid4()
        for name in _TIMESTAMP_FIELDS:
            if hasattr(obj, name) and getattr(obj, name) is None:
                setattr(obj, name, datetime.utcnow())
        self.store[(type(obj), obj.id)] = obj
        self.added.append(obj)

    async def delete(self, obj):
        self.store.pop((type(obj), obj.id), None)
        self.deleted.append(obj)

    async def execute(self, statement):
        if self.results:
            return self.results.pop(0)
        return FakeResult()

    async def commit(self):
        if self.fail_commit:
            from sqlalchemy.exc import OperationalError
            raise OperationalError("INSERT", {}, Exception("database unavailable"))
        self.commits += 1

    async def rollback(self):
        pass

    async def refresh(self, obj):
        pass

    async def close(self):
        pass


@pytest.fixture
def fake_db():
    return FakeSession()


@pytest.fixture
def catalog(mixed_catalog):
    """Mutable catalog served to the API through the get_catalog override."""
    return list(mixed_catalog)


@pytest.fixture
def client(fake_db, catalog):
    """FastAPI test client with the database and catalog overridden."""
    from fastapi.testclient import TestClient
    from main import app
    from app.core.database import get_db
    from app.services.catalog import get_catalog

    async def override_get_db():
        yield fake_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()
