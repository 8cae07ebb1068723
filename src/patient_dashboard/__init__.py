"""Patient Dashboard - record validation and table view engine for patient records."""

__version__ = "0.1.0"
