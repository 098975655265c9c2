"""menu-driven pizza store client"""

__version__ = "2.0.0"
