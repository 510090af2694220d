"""
Tests for authentication app.

This package contains test modules for:
- test_models.py: User model and manager tests
- test_services.py: AuthService tests
- test_views.py: API endpoint tests

Usage:
    pytest app/authentication/tests/
    pytest app/authentication/tests/test_services.py
"""
