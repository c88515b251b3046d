"""Root-cause analysis of bug reports with the GitHub Copilot SDK."""

__version__ = "0.1.0"
