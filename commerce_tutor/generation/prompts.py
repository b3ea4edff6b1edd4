"""
LLM Prompts for GSEB Commerce study material.

Contains prompts for the four generated artifacts:
- Syllabus - ordered, progressive topic titles for a chapter
- Explanation - rich markdown for one topic
- Quiz - multiple-choice questions with explanations
- Glossary - exam-oriented key terms

Explanations and syllabi are grounded with search; quiz and glossary
prompts ask for strict JSON.
"""
from __future__ import annotations

# =============================================================================
# Reference Material
# =============================================================================

# Keyed by "<class level>-<subject name>"
REFERENCE_RESOURCES: dict[str, list[str]] = {
    "12-Accountancy": [
        "https://cdn1.byjus.com/wp-content/uploads/2021/09/GSEB-Class-12-Elements-of-Accounts-Part-1-textbook-E.M..pdf",
        "https://gsebsolutions.com/gseb-textbook-solutions-class-12-commerce-accounts/",
        "https://cdn1.byjus.com/wp-content/uploads/2021/09/GSEB-Class-12-Elements-of-Accounts-Part-2-textbook-E.M..pdf",
    ],
}


def get_reference_resources(class_level: int, subject_name: str) -> list[str]:
    """Reference URLs registered for a class and subject."""
    return REFERENCE_RESOURCES.get(f"{class_level}-{subject_name}", [])


LATEX_RULES = """**Math & Formulas** (critical for Statistics and Accountancy):
- Use standard LaTeX for ALL formulas and equations.
- Inline math uses single dollar signs: $E = mc^2$
- Block equations use double dollar signs: $$ \\sigma = \\sqrt{\\frac{\\sum(x - \\mu)^2}{N}} $$
- Format fractions, sigma notation and indices correctly."""


# =============================================================================
# Syllabus
# =============================================================================


def syllabus_prompt(class_level: int, subject_name: str, chapter_title: str) -> str:
    resources = get_reference_resources(class_level, subject_name)
    if resources:
        reference = (
            "Refer specifically to the following resources for accurate syllabus structure: "
            + ", ".join(resources)
        )
    else:
        reference = "Refer to 'gsebsolutions.com' and official GSEB textbooks."

    return f"""You are an expert teacher for GSEB (Gujarat Board) Commerce Class {class_level}.
Create a detailed, ordered list of progressive study topics/sections for Subject: "{subject_name}", Chapter: "{chapter_title}".

{reference}

The syllabus must be comprehensive and strictly follow the official textbook structure.
Break down the chapter into logical, learnable progressive topics.

Return ONLY a valid JSON array of strings (topic titles)."""


# =============================================================================
# Explanation
# =============================================================================


def explanation_prompt(class_level: int, subject_name: str, chapter_title: str, topic: str) -> str:
    resources = get_reference_resources(class_level, subject_name)
    if resources:
        reference = "Ensure content aligns with these specific text books/solutions: " + ", ".join(
            resources
        )
    else:
        reference = (
            "Ensure content aligns with the latest GSEB syllabus, citing 'gsebsolutions.com' "
            "or textbooks where relevant."
        )

    return f"""You are an expert teacher for GSEB (Gujarat Board) Commerce Class {class_level}.
Provide a detailed, highly engaging, and visually structured explanation for the topic: "{topic}"
From Subject: "{subject_name}", Chapter: "{chapter_title}".

{reference}

**Formatting Rules:**
1. **Structure**: Use H3 headings for sub-sections.
2. **Comparisons/Data**: Use Markdown tables where possible (e.g. Features vs Limitations, Debit vs Credit).
3. **Key Terms**: Use bold for important vocabulary.
4. **Definitions**: Use blockquotes (>) for official definitions or formulas.
5. **Lists**: Use bullet points for characteristics, advantages, steps.
6. **Examples**: Provide distinct examples in a separate section.
7. {LATEX_RULES}

**Content Structure:**
1. Concept Overview: brief intro with a blockquote definition.
2. Detailed Explanation: broken down with H3 sub-headers.
3. Key Insights/Table: a comparison table or key data points.
4. Real-world Example: an Indian commerce context example.
5. Summary: 3-4 bullet points.

Format in clean, rich Markdown."""


# =============================================================================
# Quiz
# =============================================================================

QUIZ_SCHEMA_HINT = """[
  {
    "question": "string",
    "options": ["string", "string", "string", "string"],
    "correctAnswer": 0,
    "explanation": "why this answer is correct"
  }
]"""


def quiz_prompt(class_level: int, subject_name: str, chapter_title: str, count: int = 5) -> str:
    resources = get_reference_resources(class_level, subject_name)
    reference = f"Reference material: {', '.join(resources)}" if resources else ""

    return f"""Create a quiz with {count} multiple-choice questions for GSEB Class {class_level} Commerce, Subject: {subject_name}, Chapter: {chapter_title}.
{reference}

Each question has exactly 4 options and "correctAnswer" is the index (0-3) of the correct option.

{LATEX_RULES}

Return ONLY a valid JSON array matching this schema:
{QUIZ_SCHEMA_HINT}"""


# =============================================================================
# Glossary
# =============================================================================


def glossary_prompt(class_level: int, subject_name: str, chapter_title: str, count: int = 10) -> str:
    resources = get_reference_resources(class_level, subject_name)
    reference = f"Reference material: {', '.join(resources)}" if resources else ""

    return f"""Generate a glossary of {count} important terms for GSEB Class {class_level} Commerce Subject: {subject_name}, Chapter: {chapter_title}.
{reference}
Focus on exam-oriented key terms.

If a definition involves a mathematical formula (especially for Statistics/Accounts), use LaTeX with single dollar signs ($...$).

Return ONLY a valid JSON array of objects with "term" and "definition" string fields."""
