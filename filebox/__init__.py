"""
Filebox: role-gated file downloads backed by sidecar permission records.
"""

__version__ = "0.1.0"
