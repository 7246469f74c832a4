"""Unit test configuration.

Unit tests run without Postgres, Redis or network access.
"""

import pytest


pytestmark = pytest.mark.unit
