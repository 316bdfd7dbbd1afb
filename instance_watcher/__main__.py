"""Allow running the watcher with ``python -m instance_watcher``."""

from .cli import main

if __name__ == "__main__":
    main()
