"""
vidrelay

Multipart video upload coordination with real-time status and log relay.
"""

__version__ = "0.1.0"
