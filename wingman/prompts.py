"""Prompt templates for the interview tasks.

Every prompt is the persona preamble followed by task instructions, and for
text tasks the serialized problem description. The model is asked for plain
spoken English, never JSON or code blocks.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from wingman.utils import serialize_problem

SYSTEM_PROMPT = """You are Wingman AI, the user's voice during a job interview.

Produce the answer the user would say out loud, in the first person ("I"), as if they were answering live.

Do not describe how to answer and do not explain your reasoning.
Do not list options or steps.
Give only the final answer: fluent, confident, friendly and professional.

Every answer should:
- Be concise (3-6 sentences).
- Sound natural when read aloud.
- Reflect the user's real experience as a QA Engineer (manual and automation testing, CI/CD, API testing).
- Use an active voice and a confident tone."""


def _compose(body: str, system_prompt: Optional[str] = None) -> str:
    preamble = SYSTEM_PROMPT if system_prompt is None else system_prompt
    if not preamble.strip():
        return body
    return f"{preamble}\n\n{body}"


def extract_problem_prompt(system_prompt: Optional[str] = None) -> str:
    return _compose(
        """The attached images show an interview question or technical scenario.
Briefly describe, in natural first-person language, what the question or situation is about, as if I were explaining it to the interviewer.
Then give a clear, confident spoken answer I could say during the interview.
Keep it to 3-6 sentences. Do not output JSON or code blocks.""",
        system_prompt,
    )


def solution_prompt(problem_info: Mapping[str, Any], system_prompt: Optional[str] = None) -> str:
    return _compose(
        f"""Help me answer this interview question or scenario:
{serialize_problem(problem_info)}

Reply in natural spoken first-person English, as if I were speaking in the interview.
Be confident, concise (3-6 sentences) and professional.
Do not return JSON, reasoning or code blocks, only the answer I would say aloud.""",
        system_prompt,
    )


def debug_prompt(
    problem_info: Mapping[str, Any],
    current_answer: str,
    system_prompt: Optional[str] = None,
) -> str:
    return _compose(
        f"""Given this interview question or task:
{serialize_problem(problem_info)}

And my current draft answer or approach:
{current_answer}

Use the new information in the attached images to refine my answer.
Give a short, improved, confident first-person answer suitable for speaking aloud.
Do not include JSON or reasoning, only the updated spoken answer.""",
        system_prompt,
    )


def audio_file_prompt(system_prompt: Optional[str] = None) -> str:
    return _compose(
        """The attached audio contains an interview question.
Transcribe it internally without showing the transcription, then answer it in the first person as if I were replying to the interviewer directly.
Keep it short (3-6 sentences), confident and conversational.""",
        system_prompt,
    )


def audio_clip_prompt(system_prompt: Optional[str] = None) -> str:
    return _compose(
        """Listen to the attached interview question.
Reply directly in the first person with a short, natural spoken answer as if I were responding to the interviewer.
Be confident, clear and concise (3-6 sentences).""",
        system_prompt,
    )


def image_file_prompt(system_prompt: Optional[str] = None) -> str:
    return _compose(
        """Look at the attached image and work out which interview question or topic it shows.
Then answer directly in the first person as if I were explaining it to the interviewer.
Keep the answer short, confident and in natural spoken English (3-6 sentences).""",
        system_prompt,
    )
