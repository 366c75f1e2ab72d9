"""
Screen Generation Prompts
System and user prompts for the one-shot screen-set completion.
"""

from ..models.documents import Brief

# ============================================================================
# System Prompt
# ============================================================================

SYSTEM_PROMPT = (
    "You are a UX design expert who creates detailed screen specifications for applications."
)

# ============================================================================
# Output Format
# ============================================================================

OUTPUT_FORMAT = """{
  "appFlow": {
    "steps": [
      {
        "description": "Detailed description of the user journey step",
        "screenReference": "Name of the screen the user sees at this step"
      }
    ]
  },
  "screens": [
    {
      "name": "Screen name",
      "description": "Detailed description of screen purpose and functionality",
      "featureId": "EXACT id of the feature from the document that this screen implements",
      "elements": [
        {"type": "image", "properties": {"description": "What the image represents or shows"}},
        {"type": "input", "properties": {"description": "Input purpose and validation requirements"}},
        {"type": "text", "properties": {"content": "Actual text content to be displayed"}},
        {
          "type": "button",
          "properties": {
            "content": "Button label",
            "action": "What happens when clicked (e.g., 'Navigate to Home Screen')"
          }
        }
      ]
    }
  ]
}"""

GUIDELINES = """Guidelines:
- Cover the core happy path in at most 4 journey steps and at most 4 main screens
- Every screenReference must be the exact name of one of the screens
- Use only the element types image, input, text and button
- Provide clear descriptions for all elements
- Ensure button actions name the target screen or functionality
- Keep the interface clean and focused on core functionality
- Output ONLY the JSON object. NO markdown, NO explanations."""


def build_screen_prompt(brief: Brief, feature_summary: str) -> str:
    """
    Build the user prompt for one screen-set completion.

    Args:
        brief: Product brief; empty fields are left out
        feature_summary: Size-bounded summary of the feature document

    Returns:
        Prompt text
    """
    context_lines = [f"{label}: {value.strip()}" for label, value in brief.prompt_fields() if value.strip()]
    context = "\n".join(context_lines) or f"Product: {brief.display_name}"

    return f"""You are a senior UX designer responsible for creating the user journey and detailed screen specifications for a new product.
Based on the following product brief and feature document, generate the user journey and up to 4 MAIN screens in JSON format.

The context:
{context}

Feature Document Summary:
{feature_summary or "(not provided)"}

Required Output Format:
{OUTPUT_FORMAT}

{GUIDELINES}"""


__all__ = ["SYSTEM_PROMPT", "OUTPUT_FORMAT", "GUIDELINES", "build_screen_prompt"]
