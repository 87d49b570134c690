"""Pipeline activities.

Each module implements one stage: load_dataset, filter_region, crop,
aggregate, centroids and export.
"""
