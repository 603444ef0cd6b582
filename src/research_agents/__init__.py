"""Investment research reports driven by the Claude Agent SDK."""

__version__ = "0.1.0"
