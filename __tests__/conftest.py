import itertools

import pytest

from flexboard.block import use_id_provider
from flexboard.utils import EditorConfig, set_config


@pytest.fixture(autouse=True)
def default_config():
    """Run every test against the built-in defaults rather than the environment."""
    set_config(EditorConfig())
    yield
    set_config(None)


@pytest.fixture
def block_ids():
    """Deterministic ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    with use_id_provider(lambda: f"id-{next(counter)}"):
        yield
