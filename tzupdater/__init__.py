"""tzupdater — fetch, compile and activate IANA Time Zone Database releases."""

__version__ = "0.1.0"
