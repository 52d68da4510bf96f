"""dyntemplate -- expand dynamic file templates defined in Python configuration files."""

__version__ = "0.1.0"
