# shared fixtures for moodflow api tests
# provides mock db, seeded flow service, stub llm analyzer, and httpx test client

import random

import pytest
import pytest_asyncio
from unittest.mock import MagicMock
from bson import ObjectId

from httpx import AsyncClient, ASGITransport

from moodflow.main import app
from moodflow.services.db import get_db
from moodflow.services.mood_flow import MoodFlowService
from moodflow.services.sentiment import SentimentClassifier
from moodflow.dependencies import get_mood_flow_service


# test ids
USER_ID = "user_alex_001"
OTHER_USER_ID = "user_jordan_002"
PSYCHOLOGIST_ID = "psy_sarah_001"

AUTH_HEADERS = {"X-User-Id": USER_ID}


def _mood_log(mood, activities, created_at, user_id=USER_ID):
    return {
        "_id": ObjectId(),
        "user_id": user_id,
        "mood": mood,
        "description": "Entrada de prueba",
        "activities": activities,
        "wellness": {"sleep": 5, "stress": 5, "energy": 5, "social": 5},
        "habits": {"exercise": False, "meditation": False, "nutrition": False, "gratitude": False},
        "emotion": "Calma",
        "sentiment": "neutral",
        "confidence": 40,
        "keywords": [],
        "suggestions": [],
        "has_explicit_mood": True,
        "ai_analysis_used": False,
        "fallback_questions_used": False,
        "created_at": created_at,
        "updated_at": created_at,
    }


# sample data: five logs, no social activity, oldest to newest mood 4,3,3,2,2

SAMPLE_MOOD_LOGS = [
    _mood_log(4, ["trabajo"], "2025-06-01T12:00:00+00:00"),
    _mood_log(3, ["trabajo", "lectura"], "2025-06-02T12:00:00+00:00"),
    _mood_log(3, ["lectura"], "2025-06-03T12:00:00+00:00"),
    _mood_log(2, ["trabajo"], "2025-06-04T12:00:00+00:00"),
    _mood_log(2, ["trabajo"], "2025-06-05T12:00:00+00:00"),
]

OTHER_USER_LOG = _mood_log(5, ["amigos"], "2025-06-05T09:00:00+00:00", user_id=OTHER_USER_ID)

SAMPLE_PATIENT = {
    "_id": ObjectId(),
    "user_id": USER_ID,
    "psychologist_id": PSYCHOLOGIST_ID,
    "status": "active",
}


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor, supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = list(data or [])
        self._index = 0

    def sort(self, key, direction=1):
        self._data = sorted(self._data, key=lambda d: d.get(key) or "", reverse=direction == -1)
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


class MockCollection:
    """mock for a motor collection with async methods"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock(results)

    async def find_one(self, query=None, projection=None):
        if not query:
            return self._data[0] if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc
        return None

    async def insert_one(self, doc):
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def count_documents(self, query=None):
        if not query:
            return len(self._data)
        return len([d for d in self._data if self._matches(d, query)])

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = doc.get(key)
            if isinstance(value, dict):
                if "$in" in value and doc_val not in value["$in"]:
                    return False
            elif doc_val != value:
                return False
        return True


class FailingCollection(MockCollection):
    """collection whose reads blow up, for degraded-path tests"""

    def find(self, query=None, projection=None):
        raise RuntimeError("database unreachable")

    async def find_one(self, query=None, projection=None):
        raise RuntimeError("database unreachable")


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.mood_logs = MockCollection([d.copy() for d in SAMPLE_MOOD_LOGS] + [OTHER_USER_LOG.copy()])
        self.crisis_assessments = MockCollection([])
        self.crisis_alerts = MockCollection([])
        self.notifications = MockCollection([])
        self.patients = MockCollection([SAMPLE_PATIENT.copy()])

    async def connect(self):
        pass

    async def close(self):
        pass


class StubAnalyzer:
    """stand-in for the llm journal analyzer"""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    async def analyze(self, text):
        self.calls.append(text)
        return self.result


class CountingClassifier(SentimentClassifier):
    """keyword classifier that records how often it was asked"""

    def __init__(self, whole_word=False):
        super().__init__(whole_word=whole_word)
        self.calls = 0

    def analyze_text(self, text):
        self.calls += 1
        return super().analyze_text(text)


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


@pytest.fixture
def classifier():
    return CountingClassifier()


@pytest.fixture
def flow_service(classifier):
    """flow controller with a seeded rng and no llm"""
    return MoodFlowService(classifier=classifier, analyzer=None, rng=random.Random(42))


@pytest_asyncio.fixture
async def client(mock_db, flow_service):
    """httpx async test client with mocked dependencies, no identity header"""

    async def override_get_db():
        return mock_db

    def override_get_mood_flow_service():
        return flow_service

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mood_flow_service] = override_get_mood_flow_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_client(mock_db, flow_service):
    """client carrying the test user's identity header"""

    async def override_get_db():
        return mock_db

    def override_get_mood_flow_service():
        return flow_service

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mood_flow_service] = override_get_mood_flow_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=AUTH_HEADERS) as ac:
        yield ac

    app.dependency_overrides.clear()
