#!/usr/bin/env python3
"""
Live smoke test for a running Hugging Face OpenAI Proxy.
Exercises health, CORS preflight, plain and streaming chat completions.

    PROXY_URL=http://127.0.0.1:8000 python test.py
"""

import asyncio
import json
import os

import httpx

BASE_URL = os.environ.get("PROXY_URL", "http://127.0.0.1:8000")
MODEL = os.environ.get("SMOKE_MODEL", "google/gemma-2-2b-it")


async def test_feature(feature_name: str, test_func: callable):
    """Run a feature test with formatted output"""
    print(f"\n=== Testing {feature_name} ===")
    try:
        await test_func()
        print(f"✅ {feature_name} test passed")
    except Exception as e:
        print(f"❌ {feature_name} test failed: {str(e)}")
        raise


async def test_health(client: httpx.AsyncClient):
    resp = await client.get(f"{BASE_URL}/health")
    resp.raise_for_status()
    data = resp.json()
    assert data["status"] == "ok", "Expected status ok"
    print(f"Default model: {data['default_model']}, token configured: {data['token_configured']}")


async def test_preflight(client: httpx.AsyncClient):
    resp = await client.options(f"{BASE_URL}/v1/chat/completions")
    assert resp.status_code in (200, 204), f"Unexpected status {resp.status_code}"
    assert resp.headers["access-control-allow-origin"] == "*"


async def test_chat(client: httpx.AsyncClient):
    request_data = {
        "model": MODEL,
        "messages": [{"role": "user", "content": "Hello!"}],
    }
    resp = await client.post(f"{BASE_URL}/v1/chat/completions", json=request_data)
    resp.raise_for_status()
    data = resp.json()
    print(f"Reply: {data['choices'][0]['message']['content']!r}")


async def test_chat_stream(client: httpx.AsyncClient):
    request_data = {
        "model": MODEL,
        "messages": [{"role": "user", "content": "Hello!"}],
        "stream": True,
    }
    saw_done = False
    async with client.stream("POST", f"{BASE_URL}/v1/chat/completions", json=request_data) as resp:
        resp.raise_for_status()
        async for line in resp.aiter_lines():
            line = line.strip()
            if not line.startswith("data: "):
                continue
            content = line[6:].strip()
            if content == "[DONE]":
                saw_done = True
                continue
            data = json.loads(content)
            if "error" in data:
                raise RuntimeError(data["error"])
            print(".", end="", flush=True)
    assert saw_done, "Stream ended without [DONE]"
    print("\nStream completed")


async def run_tests():
    """Run all feature tests"""
    async with httpx.AsyncClient(timeout=60.0) as client:
        await test_feature("Health", lambda: test_health(client))
        await test_feature("CORS preflight", lambda: test_preflight(client))
        await test_feature("Chat", lambda: test_chat(client))
        await test_feature("Chat stream", lambda: test_chat_stream(client))


if __name__ == "__main__":
    print(f"Running Hugging Face OpenAI Proxy smoke tests against {BASE_URL}")
    asyncio.run(run_tests())
