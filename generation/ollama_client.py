from __future__ import annotations

from .http_client import post_json


def chat(
    base_url: str,
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.7,
    output_tokens: int = 500,
    api_key: str = "",
    timeout: float = 120,
) -> str:
    payload = {
        "model": model,
        "stream": False,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "options": {
            "temperature": temperature,
            "num_predict": output_tokens,
        },
    }
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    url = f"{base_url.rstrip('/')}/api/chat"
    response = post_json(url, payload, timeout=timeout, headers=headers)
    message = response.get("message", {})
    return message.get("content", "")
