"""DocPlane - cross-reference index and validator for architecture docs."""

__version__ = "0.1.0"
