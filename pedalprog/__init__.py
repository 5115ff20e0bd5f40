"""Program and read USB foot switch pedals through Linux hidraw."""

__version__ = "1.0.0"