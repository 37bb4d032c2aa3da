"""Fixed prompt templates and placeholder substitution.

Every route wraps the caller's prompt in one fixed natural-language template.
Templates carry a single ``{{prompt}}`` placeholder, so substitution is a plain
literal replace of the first occurrence.  The prompt itself is inserted
verbatim: no escaping, trimming or length checks.

Templates
---------
``TEXT_TEMPLATE``
    Asks the completion model for three ``title::description`` pairs separated
    by five dashes.
``IMAGE_TEMPLATE``
    Positive prompt for image generation.
``IMAGE_NEGATIVE_PROMPT``
    Fixed negative prompt sent alongside image requests when the provider
    variant accepts one.

Usage
-----
::

    compiled = build_text_prompt("summer sale for a surf shop")
"""

from __future__ import annotations

PROMPT_TOKEN = "{{prompt}}"

# ---------------------------------------------------------------------------
# Fixed templates.
# ---------------------------------------------------------------------------

TEXT_TEMPLATE = """
Generate three different short texts with the format "title::description", following these rules:
- **Title**: Maximum 20 characters
- **Description**: Maximum 50 characters
- **Follow the user's prompt**: The titles and descriptions should be directly related to the topic or instructions provided by the user.
**User Prompt**: "{{prompt}}"
Ensure each pair is clear, engaging, and adheres to the character limits exactly.
NO NEED TO REPEAT THE PROMPT.
ALWAYS FOLLOW THE FORMAT "title::description" FOR EACH TEXT.
REMOVE ALL UNNECESSARY TEXT AND INSTRUCTIONS. KEEP ONLY THE TEXT TO BE GENERATED.
DO NOT INCLUDE POINTS OR BULLET POINTS IN THE GENERATED TEXT.
DIVIDE EACH TEXT WITH FIVE DASHES (-----).
"""

IMAGE_TEMPLATE = """
Generate an image based on the following prompt:
{{prompt}}
"""

IMAGE_NEGATIVE_PROMPT = (
    "blurry, low quality, low resolution, distorted, deformed, disfigured, "
    "extra limbs, bad anatomy, watermark, signature, text, logo, cropped, "
    "out of frame, jpeg artifacts, nsfw"
)


def render_template(template: str, prompt: str) -> str:
    """Substitute *prompt* for the first ``{{prompt}}`` token in *template*.

    Args:
        template: Template string containing the placeholder once.
        prompt: Caller-supplied prompt, inserted verbatim.

    Returns:
        The substituted string.  If the template has no placeholder it is
        returned unchanged.
    """
    return template.replace(PROMPT_TOKEN, prompt, 1)


def build_text_prompt(prompt: str) -> str:
    """Render :data:`TEXT_TEMPLATE` for a completion request."""
    return render_template(TEXT_TEMPLATE, prompt)


def build_image_prompt(prompt: str) -> str:
    """Render :data:`IMAGE_TEMPLATE` for an image generation request."""
    return render_template(IMAGE_TEMPLATE, prompt)
