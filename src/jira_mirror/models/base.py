"""
Base models shared by all jira-mirror data models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiModel(BaseModel):
    """
    Base model for data converted from Jira API responses.

    Subclasses implement ``from_api_response`` to turn the raw JSON of the
    remote into the reduced representation kept in the snapshot.
    """

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_api_response(cls, data: dict[str, Any], **kwargs: Any) -> "ApiModel":
        """
        Create a model instance from a Jira API response.

        Args:
            data: The raw response data
            **kwargs: Additional context needed by the conversion

        Returns:
            An instance of the model
        """
        raise NotImplementedError("Subclasses must implement from_api_response")

    def to_simplified_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary, leaving out unset values."""
        return self.model_dump(exclude_none=True)
