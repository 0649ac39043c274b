"""Base schema configuration for all Pydantic models.

Usage:
    - DownstreamResponse: data decoded from the recipe API or a store
    - DomainModel: values built locally (search criteria, view state)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Private base schema with common configuration.

    Do not use directly - inherit from one of the public subclasses.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        serialize_by_alias=True,
    )


class DownstreamResponse(_BaseSchema):
    """Base class for data received from the recipe API or a favorites store.

    Extra fields are ignored: the upstream API populates different fields on
    different endpoints and adds new ones without notice.
    """

    model_config = ConfigDict(
        extra="ignore",
    )


class DomainModel(_BaseSchema):
    """Base class for locally constructed values.

    Extra fields are forbidden so typos in option names fail loudly.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )
