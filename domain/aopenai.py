import os

import httpx
import openai


OPENAI_TOKEN = os.environ.get("OPENAI_API_KEY")
MAX_TOKENS = 4000
TIMEOUT = 60 * 2
DEFAULT_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")


def openai_client_factory(
    token: str | None = None,
    *,
    timeout: float = TIMEOUT,
) -> openai.AsyncClient:
    token = OPENAI_TOKEN if token is None else token
    return openai.AsyncClient(
        api_key=token,
        timeout=timeout,
        # No retries: a failed generation is reported to the user as is.
        max_retries=0,
        http_client=httpx.AsyncClient(timeout=timeout),
    )
