"""Data access services used by handlers.

Handlers load services lazily so importing a handler never creates a boto3
resource; keep this package free of eager imports.
"""
