"""
Test suite for the FinSet topos kernel

Contains:
- tests/unit/          : Unit tests for individual modules
"""
