"""Unit test configuration.

Unit tests run without network access or Firebase credentials; HTTP is
mocked with respx and stores are in-memory fakes.
"""

import pytest


pytestmark = pytest.mark.unit
