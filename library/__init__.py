"""Library package for the studio's shared building blocks.

This package contains the configuration, data models, error types, gallery
persistence, image helpers and the generation countdown used by the agents
and the API endpoints. See individual modules for details.
"""
