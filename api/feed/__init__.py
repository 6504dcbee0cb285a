"""
Timelines assembled from the follow graph.
"""
