"""Collection services for the Windows process monitor."""
