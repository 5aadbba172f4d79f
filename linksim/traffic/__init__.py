"""Traffic generation for link simulation.

This module provides the random traffic sources feeding the shared link.
"""
