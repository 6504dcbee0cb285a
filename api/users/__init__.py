"""
Profiles and user search.
"""
