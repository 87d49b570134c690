"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Dataset URL, layer name, column mapping, default crop window
- exceptions: Custom exception hierarchy
"""
