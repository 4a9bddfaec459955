"""Infrastructure layer: persistence and other technical concerns.

The domain packages depend on this layer for database access; nothing here
knows about categories.
"""
