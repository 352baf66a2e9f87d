"""Type checker and project-manifest command line for the Azurite language."""

__version__ = "0.1.0"