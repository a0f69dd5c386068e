"""Domain layer — graph types, traversal errors, and collaborator ports.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""
