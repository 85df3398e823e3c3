"""
Build a package listing (index.json) by aggregating release archives
declared in a listing source and published on GitHub releases.
"""

__version__ = "0.1.0"
