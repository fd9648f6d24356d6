"""
Test suite for vidrelay.
"""
