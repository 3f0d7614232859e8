"""HTTP API for engine control and event streaming."""
