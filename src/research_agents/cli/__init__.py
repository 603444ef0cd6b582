"""Command line interface for research-agents."""
