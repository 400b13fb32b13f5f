import pytest

from sxew_app.models.schemas import ParameterSet
from sxew_app.services.process_model import evaluate


@pytest.fixture
def default_params() -> ParameterSet:
    return ParameterSet()


@pytest.fixture
def example_params() -> ParameterSet:
    """Reference plant: 10 kt/yr cathode, 350 d x 24 h, 85 % SX extraction."""
    return ParameterSet(
        annual_production=10000,
        working_days=350,
        working_hours=24,
        sx_recovery=85,
        pls_concentration=3.5,
        oa_ratio=1.2,
        delta_cu=10,
    )


@pytest.fixture
def example_results(example_params) -> dict:
    return evaluate(example_params).model_dump()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from sxew_app.main import app

    return TestClient(app)
