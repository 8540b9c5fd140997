"""Deployment units shipped with the project."""
