"""Shared test configuration: markers, constants and test data."""
