"""
Synchronization package: the coordinator owning the merged track collection
"""

from .coordinator import SyncCoordinator, TracksObserver

__all__ = ['SyncCoordinator', 'TracksObserver']
