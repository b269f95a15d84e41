"""
AWS Resource Tables Package.

This package exposes AWS resource metadata as queryable tables. Each table
binds one AWS resource type to a fixed column schema:

1. A list function pages through the AWS list API and streams typed items
2. A get function fetches one item by its key columns
3. Hydrate functions fetch per-item details the list call does not return,
   in dependency order, fanning out concurrently where needed
4. Columns map each item and its hydrate results to typed values

build_plugin() returns the immutable table registry and QueryRunner executes
queries against it over a Connection.
"""

from .connection import Connection
from .errors import CloudTablesError, DecodeError, HydrateConfigError, HydrateError, UnknownTableError
from .query import QueryRunner
from .registry import Plugin, build_plugin

__all__ = [
    "CloudTablesError",
    "Connection",
    "DecodeError",
    "HydrateConfigError",
    "HydrateError",
    "Plugin",
    "QueryRunner",
    "UnknownTableError",
    "build_plugin",
]
