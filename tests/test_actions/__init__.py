"""
Tests for the actions module
"""
