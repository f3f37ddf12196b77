"""bldctl — build configuration manager for multi-project codebases."""

__version__ = "0.1.0"
