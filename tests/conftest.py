from unittest.mock import MagicMock

import pytest
from requests.structures import CaseInsensitiveDict

from ksense_healthcare_assessment.api import ApiClient


def _response(status_code=200, payload=None, text=""):
    r = MagicMock()
    r.status_code = status_code
    r.ok = status_code < 400
    r.text = text
    r.json.return_value = payload
    return r


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects."""
    return _response


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = CaseInsensitiveDict()
    return s


@pytest.fixture
def sleeps():
    """Delays passed to the client's sleep function, in call order."""
    return []


@pytest.fixture
def client(session, sleeps):
    return ApiClient("test-key", base_url="https://api.test", session=session, sleep=sleeps.append)
