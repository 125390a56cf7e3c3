"""Display and dictation formatting for generated examples."""

import re

from soroban.models.abacus import Example

# Words spoken for the sign of a step, per app language
SPEECH_WORDS: dict[str, dict[str, str]] = {
    "ua": {"plus": "плюс", "minus": "мінус"},
    "ru": {"plus": "плюс", "minus": "минус"},
    "en": {"plus": "plus", "minus": "minus"},
    "es": {"plus": "más", "minus": "menos"},
}

SPEECH_LOCALES: dict[str, str] = {
    "ua": "uk-UA",
    "ru": "ru-RU",
    "en": "en-US",
    "es": "es-ES",
}

DEFAULT_LANGUAGE = "ru"

_TOKEN_RE = re.compile(r"^([+-]?)\s*(\d+)$")


def step_value(step) -> int:
    """Signed value of an output step (bare int or structured record)."""
    if isinstance(step, dict):
        return int(step["value"])
    return int(step)


def step_token(value: int) -> str:
    return f"+{value}" if value >= 0 else f"-{abs(value)}"


def example_tokens(example) -> list[str]:
    if isinstance(example, Example):
        return [step_token(a.value) for a in example.actions]
    return [step_token(step_value(s)) for s in example.get("steps", [])]


def format_example(example, show_answer: bool = True) -> str:
    """One printable line: "+5 +3 -2 = 6" (or "= ___" without the answer)."""
    tokens = " ".join(example_tokens(example))
    if isinstance(example, Example):
        answer = example.answer.value
    else:
        answer = example.get("answer")
    return f"{tokens} = {answer if show_answer else '___'}"


def to_trainer_format(example: Example) -> dict:
    """{"start": 0, "steps": ["+3", "-1", ...], "answer": n} for the trainer UI."""
    return {
        "start": example.start.value,
        "steps": example_tokens(example),
        "answer": example.answer.value,
    }


def speech_locale(language: str) -> str:
    return SPEECH_LOCALES.get(language, SPEECH_LOCALES[DEFAULT_LANGUAGE])


def speech_text(token, language: str = DEFAULT_LANGUAGE) -> str:
    """Text to dictate for one step token, e.g. "+25" -> "plus 25".

    Tokens that do not parse as a signed number are returned unchanged.
    """
    text = str(token).strip()
    match = _TOKEN_RE.match(text)
    if not match:
        return text
    words = SPEECH_WORDS.get(language, SPEECH_WORDS[DEFAULT_LANGUAGE])
    sign, digits = match.groups()
    number = str(int(digits))
    if sign == "+":
        return f"{words['plus']} {number}"
    if sign == "-":
        return f"{words['minus']} {number}"
    return number


def dictation(example, language: str = DEFAULT_LANGUAGE) -> list[str]:
    return [speech_text(t, language) for t in example_tokens(example)]
