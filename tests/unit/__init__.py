"""Unit tests for the console operator."""
