import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.

from timetabler.main import app
from timetabler.services.sample_data import build_sample_input


@pytest.fixture() #test client
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def sample_input():
    return build_sample_input()
