import os
import tempfile

# Logs and preferences go to a throwaway user data directory; this must be set
# before common.logger is first imported.
os.environ.setdefault("XDG_DATA_HOME", tempfile.mkdtemp(prefix="live-map-tests-"))

import pytest  # noqa: E402

from backend.cache.manager import clear_server_cache  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_server_cache():
    clear_server_cache()
    yield
    clear_server_cache()
