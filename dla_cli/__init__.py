"""
dla - Docker Log Aggregator

This package follows the logs of many Docker containers at once and merges
them into a single terminal stream, each line prefixed with a color-coded,
column-aligned tag naming the container it came from.
"""

__version__ = "0.1.0"
__author__ = "dla maintainers"
