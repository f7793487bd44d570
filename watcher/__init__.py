"""
Watcher package: polling, deduplication and notification.

This package contains:
- Await and monitor orchestration
- In-memory seen-version store
- Console and webhook notifiers
- Monitor configuration file loading
"""

__version__ = "1.0.0"
