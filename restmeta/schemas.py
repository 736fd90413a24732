from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Token(BaseModel):
    access_token: str = Field(..., min_length=32, description="Access token string.")
    token_type: str = Field(..., pattern="^Bearer$", description="Type of the token, typically 'Bearer'.")


class FieldPayload(BaseModel):
    """Request body that may carry registered field values as extra keys."""

    model_config = ConfigDict(extra="allow")

    def field_values(self) -> dict[str, Any]:
        """Keys in the body that are not core post attributes."""
        return dict(self.model_extra or {})


class PostCreate(FieldPayload):
    title: str = Field(..., min_length=1, title="Post Title", description="The title of the post.")
    body: str = Field("", title="Post Body", description="The main body of the post.")
    type: str = Field("post", title="Post Type", description="Resource type of the post.")


class PostUpdate(FieldPayload):
    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "title": "Updated Post Title",
                "custom_meta": "Shown to JavaScript clients",
            }
        },
    )

    title: Optional[str] = Field(None, title="Updated Title", description="The updated title of the post.")
    body: Optional[str] = Field(None, title="Updated Body", description="The updated body of the post.")
