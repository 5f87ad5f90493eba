"""
Clubhouse: club profiles, team membership workflows and role-based sessions.
"""
