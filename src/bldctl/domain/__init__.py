"""Domain layer: descriptor models, version synthesis, and the error taxonomy.

Pure values and functions only. Subprocess and filesystem access lives in
:mod:`bldctl.infrastructure`.
"""
