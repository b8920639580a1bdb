"""
Application layer: extraction, search orchestration and article loading.
"""
