"""SSB-Manager - scheduled server backups with disk-space aware retention."""

__version__ = "1.0.0"
__author__ = "SSB-Manager Team"
