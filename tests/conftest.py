# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza mocks, fixtures e configuracoes comuns
# =============================================================================

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Configura ambiente de testes globalmente."""
    env_vars = {
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "ERROR",  # Reduzir logs em testes
    }
    with patch.dict(os.environ, env_vars):
        yield


@pytest.fixture
def clean_env():
    """Limpa variaveis de ambiente para testes isolados."""
    with patch.dict(os.environ, {}, clear=True):
        yield


# =============================================================================
# FACTORIES DE QUESTOES
# =============================================================================


def make_choice(qid: str, correct: str = "B", points: float = 1.0, hint: Any = None) -> dict:
    """Payload de uma questao MULTI_CHOICE com alternativas A-D."""
    return {
        "type": "MULTI_CHOICE",
        "id": qid,
        "text": f"Pergunta {qid}",
        "options": [
            {"id": letter.lower(), "value": {"type": "text", "value": letter}}
            for letter in ("A", "B", "C", "D")
        ],
        "correct_answer": {"type": "text", "value": correct},
        "metadata": {"points": points, "hint": hint},
    }


@pytest.fixture
def make_question():
    """Factory de payloads MULTI_CHOICE."""
    return make_choice


@pytest.fixture
def sample_questions() -> list[dict]:
    """Tres questoes de multipla escolha, todas com gabarito B."""
    return [make_choice("q1"), make_choice("q2"), make_choice("q3")]


@pytest.fixture
def passage_question() -> dict:
    """Leitura com duas sub-questoes objetivas e peso 2."""
    return {
        "type": "READING_COMPREHENSION",
        "id": "p1",
        "text": "Leia o texto",
        "passage": "Era uma vez...",
        "sub_questions": [
            make_choice("p1-a", correct="A"),
            {
                "type": "MATH_INPUT",
                "id": "p1-b",
                "text": "Quanto e 2+2?",
                "correct_answer": {"type": "number", "value": 4},
                "metadata": {"hint": {"en": "Add them", "pt": "Some"}},
            },
        ],
        "metadata": {"points": 2.0},
    }


# =============================================================================
# FIXTURES DO LOADER
# =============================================================================


class FakeLoader:
    """QuestionLoader em memoria que registra cada busca."""

    def __init__(
        self,
        total: int,
        available: int | None = None,
        order_authoritative: bool = True,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.total_questions = total
        self.available = total if available is None else available
        self.order_authoritative = order_authoritative
        self.error = error
        self.delay = delay
        self.calls: list[tuple[int, int]] = []

    async def load_questions(self, start_index: int, count: int):
        import asyncio

        self.calls.append((start_index, count))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        end = min(start_index + count, self.available)
        return [make_choice(f"q{i}") for i in range(start_index, end)]


@pytest.fixture
def fake_loader():
    """Loader com 100 questoes."""
    return FakeLoader(total=100)


@pytest.fixture
def make_loader():
    """Factory de FakeLoader."""
    return FakeLoader


# =============================================================================
# FIXTURES DO KV
# =============================================================================


@pytest.fixture
def mock_kv_backend():
    """Mock de backend com KV assincrono."""
    mock = MagicMock()

    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(return_value=None)
    mock.kv.set = AsyncMock()
    mock.kv.delete = AsyncMock()

    return mock


@pytest.fixture
def kv_backend_with_data():
    """Backend com KV em dicionario (valores persistem entre chamadas)."""
    mock = MagicMock()
    _storage = {}

    async def mock_get(key):
        return _storage.get(key)

    async def mock_set(key, value):
        _storage[key] = value

    async def mock_delete(key):
        _storage.pop(key, None)

    mock.kv = AsyncMock()
    mock.kv.get = mock_get
    mock.kv.set = mock_set
    mock.kv.delete = mock_delete
    mock._storage = _storage

    return mock


# =============================================================================
# FIXTURES DO FASTAPI
# =============================================================================


@pytest.fixture
def client(kv_backend_with_data):
    """Cliente de teste FastAPI com store em memoria."""
    from fastapi.testclient import TestClient

    from quizplay import router as quiz_router
    from quizplay.config import QuizConfig
    from quizplay.server import create_app

    quiz_router.clear_attempts()
    quiz_router._config = QuizConfig()
    app = create_app(kv_backend_with_data)

    yield TestClient(app)

    quiz_router.clear_attempts()
    quiz_router.configure_store(None)
    quiz_router._config = None


# =============================================================================
# FIXTURES DE LOGS
# =============================================================================


@pytest.fixture
def capture_logs(caplog):
    """Captura logs para verificacao em testes."""
    import logging

    caplog.set_level(logging.DEBUG)
    return caplog
