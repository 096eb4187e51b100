"""
InteriorAI

Room style analysis, shopping recommendations and AI redesign images.
"""

__version__ = "1.0.0"
