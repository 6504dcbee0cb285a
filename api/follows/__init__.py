"""
One-way follow edges.
"""
