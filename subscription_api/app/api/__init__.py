"""
API package containing versioned routes.

Versions live in subpackages such as ``v1``, each exposing a
top-level ``router``.  ``errors`` and ``dependencies`` are shared by
all versions.
"""
