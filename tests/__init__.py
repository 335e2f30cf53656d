"""
Tests package - Test suite for the console operator.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Builders for the cluster objects the controller reads
"""
