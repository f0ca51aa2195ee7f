"""Stream Gateway API - media server webhook and admin REST surface."""

__version__ = "1.0.0"
