"""Structural validation of collaborator responses."""
