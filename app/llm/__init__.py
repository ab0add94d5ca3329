"""LLM 패키지 — Ollama 클라이언트 및 응답 JSON 추출.

LLM package — Ollama client and JSON extraction from model output.
"""
