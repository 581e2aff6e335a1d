"""
SWOT Link: matching entre startups e inversores sobre un store de
documentos JSON.
"""

__version__ = "0.1.0"
