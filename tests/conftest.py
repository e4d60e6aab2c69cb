"""
Pytest configuration and shared fixtures for all tests.
"""
import pytest
from fastapi.testclient import TestClient

from pdf_qa.main import create_app
from pdf_qa.services.chat_service import ChatService
from pdf_qa.services.document_service import DocumentService
from pdf_qa.services.document_store import DocumentStore

from tests.fakes import FakeChatModel, FakeExtractor, FakeLanguageService, make_settings


@pytest.fixture
def test_settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def fake_llm():
    return FakeChatModel()


@pytest.fixture
def chat_service(test_settings, fake_llm):
    return ChatService(test_settings, llm=fake_llm)


@pytest.fixture
def language_service():
    return FakeLanguageService()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def store():
    return DocumentStore()


@pytest.fixture
def document_service(test_settings, store, chat_service, language_service, extractor):
    return DocumentService(
        settings=test_settings,
        store=store,
        chat_service=chat_service,
        language_service=language_service,
        extractor=extractor,
    )


@pytest.fixture
def client(document_service):
    with TestClient(create_app(document_service)) as c:
        yield c


@pytest.fixture
def pdf_upload():
    """Multipart ``files`` argument for a small PDF upload."""
    return {"file": ("swaminarayan.pdf", b"%PDF-1.4\n% test document\n", "application/pdf")}


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
