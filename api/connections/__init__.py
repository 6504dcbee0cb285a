"""
Connection requests between two users.
"""
