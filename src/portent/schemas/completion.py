"""Foundation-model completion request and response schemas."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class CompletionMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    text: str


class CompletionOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stream: bool = False
    temperature: float = Field(default=0.6, ge=0.0, le=1.0)
    max_tokens: int = Field(default=200, ge=1, alias="maxTokens")

    @field_serializer("max_tokens")
    def serialize_max_tokens(self, max_tokens: int) -> str:
        # int64 fields travel as strings in the API's JSON mapping
        return str(max_tokens)


class CompletionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_uri: str = Field(..., alias="modelUri")
    completion_options: CompletionOptions = Field(
        default_factory=CompletionOptions, alias="completionOptions"
    )
    messages: list[CompletionMessage]


class AlternativeMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    text: str


class CompletionAlternative(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: AlternativeMessage
    status: str | None = None


class CompletionResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    alternatives: list[CompletionAlternative] = Field(default_factory=list)


class CompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    result: CompletionResult
