"""
ATIA - Advanced Threat Intelligence Aggregator dashboard client.
"""

__version__ = "0.1.0"
