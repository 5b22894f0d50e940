"""
Campus Service - visibility and relationship core of the campus social network
"""
__version__ = "1.0.0"
