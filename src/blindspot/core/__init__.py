"""Core functionality for blindspot."""
