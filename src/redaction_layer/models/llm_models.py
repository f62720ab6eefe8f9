"""
LLM-specific data models for request/response cycle.

These models are internal to the LLM layer and handle the raw communication
with inference servers (Ollama, OpenAI-compatible APIs). They are separate
from the entity models so the client implementation can change without
touching detection code.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict


class LLMGenerationRequest(BaseModel):
    """
    Internal request model for LLM generation.

    This is the standardized format sent to any LLM client implementation.
    It abstracts away provider-specific details.
    """
    model_config = ConfigDict(frozen=True)

    system_prompt: str = Field(default="", description="System / instruction prompt")
    prompt: str = Field(..., description="User prompt containing the text to analyse")
    model: str = Field(..., description="Model name/identifier (e.g., 'qwen2.5:7b')")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=2048, ge=1, le=16384, description="Maximum tokens to generate")
    format_schema: Optional[Dict[str, Any]] = Field(
        default=None,
        description="JSON Schema for structured output constraint"
    )
    seed: Optional[int] = Field(default=None, description="Random seed for reproducibility")


class LLMGenerationResponse(BaseModel):
    """
    Internal response model from LLM generation.

    Contains the raw generated text plus metadata for logging. Parsing of
    the content happens in the detection layer.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated text (typically JSON string)")
    model_version: str = Field(..., description="Actual model version used")
    finish_reason: str = Field(
        ...,
        description="Why generation stopped: 'stop', 'length', 'error', etc."
    )
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    latency_ms: int = Field(..., ge=0, description="Generation latency in milliseconds")
