"""
solarview: sunlit area and power estimation for satellite models.

Renders the model along the sun direction for every attitude sample, counts
the visible pixels of each part and converts them to projected area and
generated solar power.
"""

__version__ = "1.0.0"
