"""
Keeper shared schemas

Request/response models, lifecycle enums and the access-level policy shared
between the Keeper API server and its clients.
"""

__version__ = "0.1.0"
