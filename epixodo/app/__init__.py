"""Application composition layer.

The controller builds the backend adapter and the use cases on top of it
from the current settings, so pages never construct transports themselves.
"""
