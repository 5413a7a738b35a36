"""
Prompt templates for study material generation
"""

FLASHCARD_COUNT = 15
QUIZ_QUESTION_COUNT = 10

ARTIFACT_TYPES = ("flashcards", "quiz")

_FLASHCARDS_TEMPLATE = """
You are an expert academic tutor. I will provide you with text extracted from a student's study material.
Your task is to generate {count} highly effective flashcards based ONLY on the provided text.

OUTPUT FORMAT:
You MUST return ONLY a raw JSON array. DO NOT wrap the JSON in markdown code blocks like ```json. DO NOT add any conversational text.
It must exactly match this structure:
[
  {{ "front": "Question or term here?", "back": "Answer or definition here." }},
  {{ "front": "Another question?", "back": "Another answer." }}
]

TEXT CONTENT:
{text}
"""

_QUIZ_TEMPLATE = """
You are an expert academic tutor. I will provide you with text extracted from a student's study material.
Your task is to generate a {count}-question multiple-choice quiz based ONLY on the provided text.
Make the questions challenging but fair. Ensure there is only one obviously correct answer.

OUTPUT FORMAT:
You MUST return ONLY a raw JSON array. DO NOT wrap the JSON in markdown code blocks like ```json. DO NOT add any conversational text.
It must exactly match this structure:
[
  {{
    "question": "What is the main concept?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswerIndex": 1,
    "explanation": "Option B is correct because the text states..."
  }}
]

TEXT CONTENT:
{text}
"""


def build_prompt(artifact_type: str, text: str) -> str:
    """Embed extracted text in the template for the requested artifact type"""
    if artifact_type == "flashcards":
        return _FLASHCARDS_TEMPLATE.format(count=FLASHCARD_COUNT, text=text)
    if artifact_type == "quiz":
        return _QUIZ_TEMPLATE.format(count=QUIZ_QUESTION_COUNT, text=text)
    raise ValueError(f"Unknown artifact type: {artifact_type}")
