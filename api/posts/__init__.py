"""
Posts and post likes.
"""
