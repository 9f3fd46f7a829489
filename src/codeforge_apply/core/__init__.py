"""Core schemas, configuration, and collaborators for Codeforge Apply."""
