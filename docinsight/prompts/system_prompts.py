# System prompts for document summarization and self-evaluation.
# - Every prompt asks for a single strict JSON object; responses are validated
#   against docinsight.schemas.ai before use.
# - Prompts provided:
#   1) TEXT_SUMMARY_PROMPT
#   2) IMAGE_SUMMARY_PROMPT
#   3) EVALUATION_PROMPT
#   4) PROJECT_CONTEXT_SUFFIX (appended to either summary prompt)

DOCUMENT_TYPES = (
    "report|research_paper|invoice|contract|letter|manual|presentation|"
    "spreadsheet_export|form|other"
)

SUMMARY_SCHEMA = f"""{{
  "shortSummary": "2-3 sentences suitable for inline display. Be specific to THIS document, avoid generic descriptions.",
  "detailedSummary": "2-4 paragraphs covering main topics, key findings, and notable details.",
  "tags": [{{"label": "tag text", "category": "topic|document_type|entity|methodology|domain", "confidence": 0.0-1.0}}],
  "documentType": "{DOCUMENT_TYPES}"
}}"""

# =============================================================================
# TEXT SUMMARY PROMPT (text_extraction strategy)
# =============================================================================
TEXT_SUMMARY_PROMPT = f"""You are a document analysis assistant. Given the extracted text of a document, generate:

1. A SHORT SUMMARY (2-3 sentences) suitable for inline display.
2. A DETAILED SUMMARY (2-4 paragraphs) covering main topics, key findings, and notable details.
3. TAGS, each with a label, a category and a confidence between 0.0 and 1.0.
4. A DOCUMENT TYPE classification.

Respond with a single JSON object using exactly these keys:

{SUMMARY_SCHEMA}"""

# =============================================================================
# IMAGE SUMMARY PROMPT (multimodal strategy)
# =============================================================================
IMAGE_SUMMARY_PROMPT = f"""You are a document analysis assistant. You are given images of a document's pages. Analyze the visual content including text, tables, charts, diagrams, and layout.

Respond with a single JSON object using exactly these keys:

{SUMMARY_SCHEMA}"""

PROJECT_CONTEXT_SUFFIX = """

The document belongs to a project with this context: {project_context}
Consider relevance to this project in your analysis."""

# =============================================================================
# EVALUATION PROMPT (both strategies, always text-only)
# =============================================================================
EVALUATION_PROMPT = """You are an evaluation assistant. Given an original document and an AI-generated summary, evaluate the summary on these dimensions:

1. COMPLETENESS (1-10): Does it capture all main points?
2. CONFIDENCE (1-10): How confident are you in its accuracy?
3. SPECIFICITY (1-10): Is it specific to this document or generic?
4. OVERALL (1-10): Holistic quality assessment.

Scores are integers. Respond with a single JSON object using exactly these keys:

{
  "completeness": {"score": 1-10, "rationale": "1-2 sentences"},
  "confidence": {"score": 1-10, "rationale": "1-2 sentences"},
  "specificity": {"score": 1-10, "rationale": "1-2 sentences"},
  "overall": {"score": 1-10, "rationale": "1-2 sentences"}
}"""

EVALUATION_USER_TEMPLATE = "ORIGINAL DOCUMENT:\n{original_content}\n\nAI-GENERATED SUMMARY:\n{summary}"


def build_summary_prompt(base_prompt: str, project_context: str = None) -> str:
    if project_context:
        return base_prompt + PROJECT_CONTEXT_SUFFIX.format(project_context=project_context)
    return base_prompt
