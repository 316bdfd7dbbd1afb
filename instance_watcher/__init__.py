"""
instance-watcher

Instance-side agent that picks up download job descriptors from a watch
directory, fetches and optionally decrypts the referenced files, places them
atomically and keeps its own executable up to date.
"""

__version__ = "1.1.0"
