import os

# Settings are read at import time; pin them before anything from edupal loads
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = ""
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""
os.environ["REDIS_URL"] = ""
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_secret"

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from edupal.database import get_db, init_db
from edupal.dependencies import (
    generation_rate_limiter,
    get_artifact_cache,
    get_generator,
    get_paystack,
    get_storage,
)
from edupal.exceptions import AuthenticationError, StorageError, UpstreamServiceError
from edupal.main import app
from edupal.models import Resource
from edupal.services.paystack_service import PaystackClient
from edupal.utils.cache import ArtifactCache

LECTURE_NOTES = (
    "Photosynthesis converts light energy into chemical energy. "
    "Chlorophyll in the thylakoid membranes absorbs red and blue light, "
    "and the Calvin cycle fixes carbon dioxide into glucose."
)

FLASHCARDS_JSON = '[{"front": "What absorbs light?", "back": "Chlorophyll"}]'
QUIZ_JSON = (
    '[{"question": "Where does the Calvin cycle fix CO2?", '
    '"options": ["Stroma", "Nucleus", "Cell wall", "Vacuole"], '
    '"correctAnswerIndex": 0, "explanation": "It runs in the stroma."}]'
)


class FakeGenerator:
    """Stands in for GeminiService; hands out queued responses in order"""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if not self.responses:
            raise UpstreamServiceError("Empty response from the AI model")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeStorage:
    """In-memory bucket with token lookup"""

    def __init__(self, bucket="resources"):
        self.bucket = bucket
        self.files = {}
        self.tokens = {}
        self.downloads = []
        self.signed = []

    def download(self, path):
        self.downloads.append(path)
        if path not in self.files:
            raise StorageError("Failed to read file from storage")
        return self.files[path]

    def create_signed_url(self, path, expires_in):
        self.signed.append((path, expires_in))
        return f"https://storage.test/signed/{path}?expires={expires_in}"

    def get_user_id(self, access_token):
        if access_token not in self.tokens:
            raise AuthenticationError("Invalid token")
        return self.tokens[access_token]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def paystack():
    return PaystackClient(secret_key="sk_test_secret")


@pytest.fixture
def client(db_session, generator, storage, paystack):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_artifact_cache] = lambda: ArtifactCache(None)
    app.dependency_overrides[get_paystack] = lambda: paystack
    app.dependency_overrides[generation_rate_limiter] = lambda: None

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_resource(db_session, storage):
    """Create a resource row and, unless data is None, its file in the bucket"""

    def _make(path="notes/photosynthesis.txt", data=LECTURE_NOTES.encode(), file_url=None):
        resource = Resource(
            id=uuid.uuid4(),
            title="Photosynthesis notes",
            file_url=file_url if file_url is not None else
            f"https://proj.supabase.co/storage/v1/object/public/resources/{path}",
            download_count=0
        )
        db_session.add(resource)
        db_session.commit()
        if data is not None:
            storage.files[path] = data
        return resource

    return _make
