"""Europe Map Pipeline.

Downloads the Natural Earth country borders, narrows them to Europe,
crops them to a map window, and derives the per-country and
per-subregion statistics (area, population density, centroids) used
by the choropleth and label-point visualisations.
"""

__version__ = "0.1.0"
