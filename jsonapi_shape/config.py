"""
Resolver settings.

Settings are read once from the environment (JSONAPI_SHAPE_* variables)
and shared by every resolver built without explicit settings.
"""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field


class DanglingPolicy(str, Enum):
    """What to do when an expanded relationship points at a missing resource."""

    RAISE = "raise"  # fail with DataError(DANGLING_REFERENCE)
    NULL = "null"  # to-one becomes None, to-many drops the member
    IDENTIFIER = "identifier"  # leave the bare identifier in place


class ResolverSettings(BaseModel):
    """
    Settings for document resolution.

    Attributes:
        dangling_policy: Handling of references missing from the document
        check_cardinality: Reject relationship data whose shape disagrees
            with the declared cardinality
        max_include_depth: Upper bound on include tree depth (None = unbounded)
    """

    model_config = ConfigDict(frozen=True)

    dangling_policy: DanglingPolicy = Field(
        DanglingPolicy.RAISE, description="Policy for dangling references"
    )
    check_cardinality: bool = Field(True, description="Validate to-one/to-many data shape")
    max_include_depth: int | None = Field(None, ge=1, description="Maximum include depth")


@lru_cache()
def get_settings() -> ResolverSettings:
    """
    Get resolver settings from environment.

    Uses lru_cache for singleton pattern.
    """
    max_depth = os.getenv("JSONAPI_SHAPE_MAX_INCLUDE_DEPTH")
    return ResolverSettings(
        dangling_policy=os.getenv("JSONAPI_SHAPE_DANGLING_POLICY", "raise").lower(),
        check_cardinality=os.getenv("JSONAPI_SHAPE_CHECK_CARDINALITY", "true").lower() == "true",
        max_include_depth=int(max_depth) if max_depth else None,
    )
