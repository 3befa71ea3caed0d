"""
Portfolio projects: CRUD over projects and their images, read-only tags.
"""
