"""
Configuration: environment-driven settings and infrastructure factories.
"""
