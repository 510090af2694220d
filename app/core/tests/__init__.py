"""
Tests for core app.

This package contains test modules for:
- test_services.py: ServiceResult and service_operation
- test_exceptions.py: Exception taxonomy and API envelope
- test_responses.py: Error code to HTTP status mapping
- test_views.py: Health check
"""
