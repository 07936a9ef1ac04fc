from __future__ import annotations

import pytest
import structlog

from docmap import DocumentMapper


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration applied by CLI tests."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def mapper() -> DocumentMapper:
    return DocumentMapper()
