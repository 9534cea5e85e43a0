"""
API package containing versioned routes.

``deps`` holds helpers shared by every version; each version
subpackage exposes a top-level ``router``.
"""
