"""
HTTP Layer

FastAPI application factory over a ScreenTimeVisualization.
"""

from .server import create_app, load_visualization

__all__ = ['create_app', 'load_visualization']
