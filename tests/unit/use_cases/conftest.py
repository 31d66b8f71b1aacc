import pytest
from unittest.mock import AsyncMock, MagicMock

from src.domain.client import Client
from src.domain.document_line import DocumentLine


def _replace_lines(document_id, items):
    return [DocumentLine.from_item(document_id, position, item) for position, item in enumerate(items)]


@pytest.fixture
def mock_document_repo():
    """Document repository whose writes echo the entity back"""
    repo = MagicMock()

    async def create(document):
        document.id = document.id or 100
        return document

    repo.create = AsyncMock(side_effect=create)
    repo.update = AsyncMock(side_effect=lambda document: document)
    repo.reserve_sequence = AsyncMock(return_value=True)
    repo.issue_draft = AsyncMock(return_value=True)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.list_documents = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_line_repo():
    repo = MagicMock()
    repo.get_by_document_id = AsyncMock(return_value=[])
    repo.replace_lines = AsyncMock(side_effect=_replace_lines)
    return repo


@pytest.fixture
def mock_counter_repo():
    repo = MagicMock()
    repo.next_sequence = AsyncMock(return_value=7)
    return repo


@pytest.fixture
def mock_ledger_service():
    service = MagicMock()
    service.record_settlement = AsyncMock(return_value=True)
    return service


@pytest.fixture
def sample_client():
    return Client(id=1, name="Loja Central Lda", tax_id="123456789", address="Rua 5 de Julho, Praia")


@pytest.fixture
def mock_client_directory(sample_client):
    directory = MagicMock()
    directory.get_by_id = AsyncMock(return_value=sample_client)
    return directory
