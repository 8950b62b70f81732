"""
SceneKit Route Blueprints
"""

from .health import health_bp
from .housekeeping import housekeeping_bp

__all__ = [
    "health_bp",
    "housekeeping_bp",
]
