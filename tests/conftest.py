import pytest


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clean_state():
    """Empty the global session before and after a test."""
    from parcel_feasibility.state import state
    state.registry.clear()
    state.assumptions.reset_to_defaults()
    yield state
    state.registry.clear()
    state.assumptions.reset_to_defaults()
