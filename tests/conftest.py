from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, text

from snapquiz import models
from snapquiz.database import enable_sqlite_foreign_keys, get_session
from snapquiz.deps import get_completion_client
from snapquiz.main import app
from snapquiz.schemas import GeneratedTest
from snapquiz.services.user_service import PWD_CONTEXT

# ============================================================================
# IN-MEMORY DATABASE FOR TESTING
# ============================================================================

# StaticPool shares the single in-memory database across threads/sessions
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine)

TEST_PASSWORD = "testpass123"


@pytest.fixture(scope="session")
def engine():
    return test_engine


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create all tables in the test database once per session."""
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(autouse=True)
def cleanup_db_between_tests():
    """Clean up test data after each test."""
    yield

    # FK-safe order
    with Session(test_engine) as session:
        session.execute(text("DELETE FROM answer"))
        session.execute(text("DELETE FROM attempt"))
        session.execute(text('DELETE FROM "option"'))
        session.execute(text("DELETE FROM question"))
        session.execute(text("DELETE FROM test"))
        session.execute(text('DELETE FROM "user"'))
        session.commit()


@pytest.fixture
def session():
    """Provide a database session for tests."""
    with Session(test_engine) as session:
        yield session


# ============================================================================
# ENTITY FIXTURES
# ============================================================================


def create_user(username: str = "alice", email: str = "alice@example.com") -> models.User:
    with Session(test_engine) as session:
        user = models.User(
            first="Alice",
            last="Tan",
            username=username,
            email=email,
            password_hash=PWD_CONTEXT.hash(TEST_PASSWORD),
        )
        session.add(user)
        session.commit()
        user_id = user.id

    with Session(test_engine) as session:
        return session.get(models.User, user_id)


def build_quiz(engine, user_id: int, layout=None) -> SimpleNamespace:
    """Insert a test and return its ids.

    `layout` is a list of (mcq_type, [(label, is_correct), ...]). The result has
    ``test_id`` and ``questions``, a list of namespaces with ``id``, ``type``
    and ``options`` (label -> option id).
    """
    if layout is None:
        layout = [
            ("single", [("A", True), ("B", False), ("C", False), ("D", False)]),
            ("multiple", [("A", True), ("B", True), ("C", False), ("D", False)]),
            ("single", [("A", False), ("B", True), ("C", False), ("D", False)]),
        ]

    with Session(engine) as session:
        test = models.Test(title="Cell Biology", user_id=user_id)
        session.add(test)
        session.flush()

        questions = []
        for index, (mcq_type, options) in enumerate(layout, start=1):
            question = models.Question(
                test_id=test.id,
                question_text=f"Question {index}?",
                mcq_type=models.McqType(mcq_type),
                explanation_text=f"Explanation {index}",
            )
            session.add(question)
            session.flush()

            option_ids = {}
            for label, is_correct in options:
                option = models.Option(
                    question_id=question.id,
                    option_text=f"Option {label}",
                    is_correct=is_correct,
                )
                session.add(option)
                session.flush()
                option_ids[label] = option.id
            questions.append(SimpleNamespace(id=question.id, type=mcq_type, options=option_ids))

        test_id = test.id
        session.commit()

    return SimpleNamespace(test_id=test_id, questions=questions)


def full_answers(quiz, answers) -> dict:
    """Complete an answer map with [] for every question it leaves out."""
    return {q.id: answers.get(q.id, []) for q in quiz.questions}


@pytest.fixture
def user():
    """A registered user with password TEST_PASSWORD."""
    return create_user()


@pytest.fixture
def other_user():
    return create_user(username="bob", email="bob@example.com")


@pytest.fixture
def quiz(user):
    """A 3-question test owned by `user`: single, multiple (A+B), single."""
    return build_quiz(test_engine, user.id)


# ============================================================================
# FASTAPI APP & TEST CLIENT
# ============================================================================


class FakeCompletionClient:
    """Stands in for the completion API; records the calls it receives."""

    def __init__(self, payload: dict):
        self.payload = payload
        self.calls = []

    def generate_test(self, content: str, question_count: int = 5) -> GeneratedTest:
        self.calls.append((content, question_count))
        return GeneratedTest.model_validate(self.payload)


SAMPLE_GENERATED_TEST = {
    "title": "Photosynthesis <b>Basics</b>",
    "questions": [
        {
            "question_text": "Where does photosynthesis happen?",
            "options": [
                {"option_text": "Chloroplast", "is_correct": True},
                {"option_text": "Nucleus", "is_correct": False},
                {"option_text": "Ribosome", "is_correct": False},
                {"option_text": "Golgi", "is_correct": False},
            ],
            "explanation": "Chloroplasts hold chlorophyll.",
        },
        {
            "question_text": "Which are products of photosynthesis?",
            "options": [
                {"option_text": "Glucose", "is_correct": True},
                {"option_text": "Oxygen", "is_correct": True},
                {"option_text": "Nitrogen", "is_correct": False},
                {"option_text": "Methane", "is_correct": False},
            ],
            "explanation": "Glucose and oxygen are produced.",
        },
        {
            "question_text": "What pigment absorbs light?",
            "options": [
                {"option_text": "Chlorophyll", "is_correct": True},
                {"option_text": "Melanin", "is_correct": False},
                {"option_text": "Keratin", "is_correct": False},
                {"option_text": "Hemoglobin", "is_correct": False},
            ],
            "explanation": "Chlorophyll absorbs red and blue light.",
        },
    ],
}


@pytest.fixture
def completion_client():
    return FakeCompletionClient(SAMPLE_GENERATED_TEST)


@pytest.fixture
def client(completion_client):
    """TestClient wired to the in-memory database and the fake completion client."""

    def override_get_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_completion_client] = lambda: completion_client

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, user):
    """A client logged in as `user`."""
    response = client.post(
        "/api/auth/login",
        json={"username": user.username, "password": TEST_PASSWORD},
    )
    assert response.status_code == 200
    return client
