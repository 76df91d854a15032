"""syslens - push a resource snapshot to a collector over TCP."""

__version__ = "1.0.0"
