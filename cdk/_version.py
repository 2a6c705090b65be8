"""Version from VERSION file."""
__version__ = "0.9.0"
