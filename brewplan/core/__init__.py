"""Core — models, configuration, observability and services."""
