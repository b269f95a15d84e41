"""
Type definitions for the AWS resource tables plugin.

This module contains type aliases shared by fetchers, hydrators and the query
runner, in place of bare Any annotations.
"""

# boto3 service clients are generated at runtime and ship no static stubs, so
# this alias only documents which client a function expects.
from typing import Any, Dict, Mapping

IAMClient = Any

# Query inputs and outputs
Quals = Mapping[str, Any]
Row = Dict[str, Any]

# Hydrate results, keyed by hydrate function name
HydrateResults = Mapping[str, Any]
