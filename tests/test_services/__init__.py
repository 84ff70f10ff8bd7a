"""
Tests for the services module
"""
