"""Test package for the archive signature core

Shared fixtures live in conftest.py.
"""
