"""Live session state: the session engine, its save queue, timers and events."""
