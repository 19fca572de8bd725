"""
Test Suite

Structure:
- tests/unit/: Tests for individual components with all network calls mocked

Uses pytest with pytest-asyncio for testing async functionality.
"""
