"""Administrative command-line client for the pipeline web service."""

__version__ = "0.1.0"
