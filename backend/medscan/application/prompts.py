from __future__ import annotations

_ANSWER_RULES = """Once you identify the medicine, use your general knowledge to provide:
1. The name of the medicine.
2. What the medicine is commonly used for (indications). Keep it simple and easy to understand.
3. Common major warnings, side effects, or precautions for this medicine. Do not just say "none listed in text". You must provide actual warnings for the drug you identified.

Return your answer STRICTLY as a JSON object with these exact keys: "name", "usage", "warnings".
Do not include any formatting like Markdown code blocks. Just return the raw JSON object."""


def build_text_prompt(extracted_text: str) -> str:
    return f"""You are a medical assistant looking at text extracted from a medicine box or bottle using OCR.
Here is the raw text:
\"\"\"
{extracted_text}
\"\"\"

Based on this text, please identify the actual name of the medicine.
{_ANSWER_RULES}"""


def build_vision_prompt(extracted_text: str) -> str:
    hint = extracted_text.strip()
    hint_block = ""
    if hint:
        hint_block = (
            "\nOCR read the following text from the same photo, which may contain errors:\n"
            f'"""\n{hint}\n"""\n'
        )
    return f"""You are a medical assistant looking at a photograph of a medicine box or bottle.
Read the package in the attached image and identify the actual name of the medicine.
{hint_block}
{_ANSWER_RULES}"""
