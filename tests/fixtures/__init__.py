"""Test fixtures for the console operator."""
