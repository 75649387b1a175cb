"""SplitShare: shared expense tracking with debt minimization."""

__version__ = "0.1.0"
