"""Plugins shipped with bldctl."""
