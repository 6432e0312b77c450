"""Test package for hubmap.

This package contains:
- Unit tests (test_spatial.py, test_store.py, test_csv_codec.py, test_geocoding.py)
- Persistence and configuration tests (test_persistence.py, test_config_loader.py)
- HTTP service tests (test_actions.py)
- Test configuration (conftest.py)
"""
