"""Test package for smartcharge.

This package contains:
- Unit tests (test_geo.py, test_normalization.py, test_selection.py,
  test_heuristic.py, test_personalized.py, test_qtable.py, test_queries.py,
  test_config.py, test_service.py)
- Test configuration (conftest.py)
"""
