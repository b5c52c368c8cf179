"""Pacing Optimizer - W' balance constrained power pacing for cycling routes."""

__version__ = "0.1.0"
__version_date__ = "2026-10-19"
