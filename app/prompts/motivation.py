"""동기부여 메시지 및 감정 추론 프롬프트 템플릿."""

MOTIVATION_PROMPT = """[INST]
The user is studying {subject}.
They are feeling {emotion} and their progress is: {progress}.

Here are relevant motivational quotes from the EduPlanner knowledge base:
{quote_block}

Now generate a personalized motivational message in JSON:
{{
  "motivation": "<message>"
}}
[/INST] ```json
"""

EMOTION_PROMPT = """[INST]
The user wrote: "{user_text}"
Please identify their emotion in one word (e.g., 'stressed', 'discouraged', 'motivated').
Return only a JSON object:
{{
  "emotion": "<inferred_emotion>"
}}
[/INST] ```json
"""


def build_motivation_prompt(
    subject: str,
    quotes: list[str],
    emotion: str | None = None,
    progress: str | None = None,
) -> str:
    quote_block = "\n".join(f'{i}. "{q}"' for i, q in enumerate(quotes, start=1))
    return MOTIVATION_PROMPT.format(
        subject=subject,
        emotion=emotion or "neutral",
        progress=progress or "unknown",
        quote_block=quote_block,
    )


def build_emotion_prompt(user_text: str) -> str:
    return EMOTION_PROMPT.format(user_text=user_text)
