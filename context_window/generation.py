"""
Answer generation with Claude on AWS Bedrock.
"""
import asyncio
import json
import os

import boto3

from .config import default_ai_model
from .errors import GenerationError


class ChatClient:
    """Thin wrapper over the Bedrock runtime messages API."""

    def __init__(
        self,
        aws_region: str = None,
        max_tokens: int = 1024,
        temperature: float = 0.1
    ):
        """
        Initialize the chat client.

        Args:
            aws_region: AWS region for Bedrock
            max_tokens: Maximum tokens in a generated answer
            temperature: Sampling temperature (low for factual answers)
        """
        self.bedrock_client = boto3.client(
            service_name="bedrock-runtime",
            region_name=aws_region or os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.max_tokens = max_tokens
        self.temperature = temperature

    def complete_sync(self, model: str, system: str, user: str) -> str:
        """Call Claude via AWS Bedrock and return the answer text."""
        native_request = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system,
            "messages": [{"role": "user", "content": [{"type": "text", "text": user}]}]
        }

        try:
            response = self.bedrock_client.invoke_model(
                modelId=model or default_ai_model(),
                body=json.dumps(native_request)
            )
            model_response = json.loads(response["body"].read())
        except Exception as e:
            raise GenerationError("Bedrock chat completion failed", e) from e

        content = model_response.get("content") or []
        if not content:
            return ""
        return content[0].get("text", "").strip()

    async def complete(self, model: str, system: str, user: str) -> str:
        return await asyncio.to_thread(self.complete_sync, model, system, user)
