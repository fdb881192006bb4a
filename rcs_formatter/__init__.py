"""
RCS Formatter: compliance validation and media sizing for RCS rich cards
"""

__version__ = "1.0.0"
