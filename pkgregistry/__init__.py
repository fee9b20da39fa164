"""
Package registry consistency engine.
Packages, names, versions, users and stars over a relational store.
"""

__version__ = "1.0.0"
