"""Service layer — traversal engine and crawl orchestration.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
