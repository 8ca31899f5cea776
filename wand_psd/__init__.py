"""Versatile wand selection and particle-size tools for micrographs."""

__version__ = "0.1.0"
