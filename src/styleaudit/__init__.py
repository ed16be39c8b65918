"""styleaudit — incremental audit pipeline for stylesheets and the code that uses them."""

__version__ = "0.4.0"
