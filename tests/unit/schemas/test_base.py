"""Tests for base schema configuration and behavior."""

from enum import StrEnum

import pytest
from pydantic import Field, ValidationError

from forkly.schemas.base import DomainModel, DownstreamResponse


pytestmark = pytest.mark.unit


class TestCamelCaseAliases:
    """Tests for camelCase aliases on both schema bases."""

    def test_accepts_camel_case_input(self):
        """Should populate snake_case fields from camelCase keys."""

        class TestResponse(DownstreamResponse):
            ready_in_minutes: int

        response = TestResponse.model_validate({"readyInMinutes": 25})
        assert response.ready_in_minutes == 25

    def test_accepts_snake_case_input(self):
        """Should also accept field names."""

        class TestResponse(DownstreamResponse):
            ready_in_minutes: int

        assert TestResponse(ready_in_minutes=25).ready_in_minutes == 25

    def test_serializes_to_camel_case(self):
        """Should dump with camelCase keys."""

        class TestModel(DomainModel):
            max_ready_time: int

        data = TestModel(max_ready_time=30).model_dump()

        assert data == {"maxReadyTime": 30}


class TestExtraFieldsBehavior:
    """Tests for extra fields handling in different schema types."""

    def test_downstream_response_ignores_extra_fields(self):
        """DownstreamResponse should ignore unknown fields from the API."""

        class TestResponse(DownstreamResponse):
            title: str

        response = TestResponse.model_validate({"title": "Soup", "weightWatcherSmartPoints": 3})
        assert response.title == "Soup"
        assert not hasattr(response, "weightWatcherSmartPoints")

    def test_domain_model_forbids_extra_fields(self):
        """DomainModel should reject unknown options."""

        class TestModel(DomainModel):
            cuisine: str | None = None

        with pytest.raises(ValidationError) as exc_info:
            TestModel(cuisine="Thai", cusine="typo")

        assert any(err["type"] == "extra_forbidden" for err in exc_info.value.errors())


class TestValidationBehavior:
    """Tests for validation settings on base schemas."""

    def test_domain_model_validates_on_assignment(self):
        """DomainModel should validate when fields are assigned."""

        class TestModel(DomainModel):
            number: int = Field(10, ge=1)

        model = TestModel()

        with pytest.raises(ValidationError):
            model.number = 0

    def test_use_enum_values(self):
        """Enums should be stored as their values."""

        class Sort(StrEnum):
            TIME = "time"

        class TestModel(DomainModel):
            sort: Sort

        assert TestModel(sort=Sort.TIME).model_dump()["sort"] == "time"
