"""
Test fixtures package.

Provides shared fixtures, fake adapters and cryptographic helpers for the
instance-watcher test suite.
"""
