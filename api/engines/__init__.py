"""
Reno Visualizer Engines Package

This package contains the deterministic engines behind the API:
- coverage: Tile layout, unit conversion, and wastage/cost estimation
"""

__version__ = "1.0.0"
