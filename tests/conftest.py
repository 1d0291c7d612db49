"""Pytest fixtures for all tests."""

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config, CodecConfig
from pikaid.engine import LongDivisionConverter, NativeConverter, reset_backend
from service.app import create_app


@pytest.fixture(autouse=True)
def fresh_backend():
    """Every test starts with undetected capabilities."""
    reset_backend()
    yield
    reset_backend()


@pytest.fixture
def native():
    return NativeConverter()


@pytest.fixture
def manual():
    return LongDivisionConverter()


@pytest.fixture(params=["native", "manual"])
def converter(request):
    """Run a test once per strategy."""
    return NativeConverter() if request.param == "native" else LongDivisionConverter()


@pytest.fixture
def app_config():
    return Config(codec=CodecConfig(backends=["native", "manual"]))


@pytest.fixture
async def app(app_config):
    """Create test FastAPI app."""
    return create_app(app_config)


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
