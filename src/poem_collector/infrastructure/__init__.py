"""
Infrastructure Layer
=====================

Database connection management shared by the poem module.
"""
