"""Text generation through OpenAI chat models."""

import logging
from typing import Optional, Protocol

from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, SecretStr

logger = logging.getLogger(__name__)


class Generation(BaseModel):
    """Text returned by the model plus usage metadata."""

    text: str
    model: str
    total_tokens: Optional[int] = None


class GenerationClient(Protocol):
    """Anything that turns a system and user prompt into text."""

    async def generate(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> Generation: ...


def create_prompt_template() -> ChatPromptTemplate:
    """Create the two-message prompt; both messages are passed in verbatim."""
    return ChatPromptTemplate.from_messages(
        [
            ("system", "{system_prompt}"),
            ("human", "{user_prompt}"),
        ]
    )


class OpenAIGenerationClient:
    """Generation client backed by ``ChatOpenAI``.

    A fresh chat model is built per call because the model name, output
    budget and temperature are chosen per request. Retries are disabled;
    failures surface to the caller on the first attempt.
    """

    def __init__(self, api_key: SecretStr, timeout: float = 60.0) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.prompt = create_prompt_template()

    async def generate(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        model: str,
        max_tokens: int,
        temperature: float,
    ) -> Generation:
        llm = ChatOpenAI(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=self.api_key,
            timeout=self.timeout,
            max_retries=0,
        )
        chain = self.prompt | llm

        result = await chain.ainvoke(
            {"system_prompt": system_prompt, "user_prompt": user_prompt}
        )

        usage = result.usage_metadata or {}
        model_name = result.response_metadata.get("model_name") or model
        logger.debug(f"Generation finished with {usage.get('total_tokens')} tokens")

        return Generation(
            text=str(result.content),
            model=model_name,
            total_tokens=usage.get("total_tokens"),
        )
