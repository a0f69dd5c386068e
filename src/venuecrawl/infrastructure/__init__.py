"""Infrastructure layer — HTTP source, CSV snapshots, terminal prompt.

This layer depends on stdlib, third-party libs (httpx, click), and the
domain layer. It must never import from services, commands, or output.
"""
