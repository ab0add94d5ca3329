"""프롬프트 템플릿 패키지 (Prompt templates for plan and motivation LLM calls)."""
