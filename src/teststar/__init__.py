"""
Teststar assessment engine.

Grades test submissions into durable reports, tracks time-windowed study goals and
awards achievement badges from the learner's full report history.
"""

from .config.loader import load_settings

__all__ = ["load_settings"]
