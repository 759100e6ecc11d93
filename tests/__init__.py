"""
Test suite for kmeans_engine.

This package contains all tests organized by component:
- test_algorithms/: Tests for strategies, trees, initializers and the engine
- test_api/: Tests for the host entry point and configuration
"""
