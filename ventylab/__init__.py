"""
VentyLab lesson content toolkit.

Parses, validates, normalizes and loads the JSON lesson documents of the
VentyLab mechanical-ventilation course.
"""

__version__ = "0.1.0"
