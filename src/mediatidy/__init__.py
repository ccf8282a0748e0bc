"""MediaTidy - normalize media files into Matroska with external tools."""

__version__ = "0.1.0"
