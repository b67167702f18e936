import pathlib
import site

import pytest
from typedsql.connection import dispose_all_engines
from typedsql.decode import get_type_adapter

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_engines():
    """Dispose cached engines and validators around each test to ensure isolation."""
    dispose_all_engines()
    get_type_adapter.cache_clear()
    yield
    dispose_all_engines()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.values',
    'tests.fixtures.sqlite',
]
