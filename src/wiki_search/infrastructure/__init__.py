"""
Infrastructure layer: HTTP sources, XML dumps and embedding backends.
"""
