"""
Backend-specific test fixtures and configuration.

These fixtures extend the global fixtures with service instances built on
the mock datastores, for tests that exercise services directly.
"""

import sys
from pathlib import Path

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "backend"))


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def otp_service(user_store, notifier, test_settings):
    from samplehub.services.otp_service import OtpService
    return OtpService(user_store, notifier, test_settings)


@pytest.fixture
def user_service(user_store, notifier, test_settings):
    from samplehub.services.principal_service import PrincipalService
    return PrincipalService(user_store, notifier, test_settings)


@pytest.fixture
def admin_service(admin_store, notifier, test_settings):
    from samplehub.services.principal_service import PrincipalService
    return PrincipalService(admin_store, notifier, test_settings)


@pytest.fixture
def sample_service(mock_catalog_db, test_settings):
    from samplehub.services.catalog_service import SAMPLES, CatalogService
    return CatalogService(mock_catalog_db, SAMPLES, test_settings)


@pytest.fixture
def artist_service(mock_catalog_db, test_settings):
    from samplehub.services.catalog_service import ARTISTS, CatalogService
    return CatalogService(mock_catalog_db, ARTISTS, test_settings)
