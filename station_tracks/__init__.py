"""
Station Tracks: keep a local list of played tracks in sync with a radio station server

Station Tracks is the client-side data layer behind a station's "recently played" log.
It talks to the station backend in two ways and folds both into a single ordered list:

**HTTP listing and CRUD (`station_tracks/tracks/`)**
- Cursor-paginated listing of played tracks, newest first
- Filtered search by artist, title and played-at date range
- Admin operations: add, update and delete track records
- Group (playlist bucket) listing

**Live stream (`station_tracks/live/`)**
- A WebSocket push channel delivering each track as it is played
- Heartbeat, automatic reconnect and FM/underground channel switching
- On-demand request for the currently playing track

**Synchronization (`station_tracks/sync/`)**
- One canonical, de-duplicated collection owned by the sync coordinator
- Pushed tracks are suppressed while a filtered search is being displayed

Supporting packages provide configuration (`config/`), logging and helpers (`utils/`),
the HTTP and WebSocket transports (`transport/`), the exception hierarchy and operation
outcomes (`core/`), an engine facade (`engine.py`) and a Click command line (`main.py`).
"""

__version__ = "0.4.0"

__author__ = "Station Tracks Team"

__description__ = "Client-side track log synchronization for radio station servers"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
