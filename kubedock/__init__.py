"""State, filtering and stream helpers for a container engine API backed by Kubernetes."""

__version__ = "0.1.0"