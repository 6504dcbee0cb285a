"""
Threaded comments and comment likes.
"""
