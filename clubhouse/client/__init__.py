"""
Client-side session layer: identity, role resolution, bootstrap and routing.
"""
