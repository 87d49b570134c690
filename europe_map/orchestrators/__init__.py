"""Pipeline orchestration.

- europe_pipeline: load -> filter -> crop -> aggregate -> centroids
"""
