"""Instruction prompt compilation for face-swap generation.

Gemini receives a single text instruction alongside the two images.  The
instruction is assembled from three parts:

    [Fixed: face-swap instruction]

    Additional instructions: [User prompt]

    [Fixed: negative qualifier]

The user prompt section is omitted when the user left the field empty.
Gemini has no dedicated negative-prompt parameter, so the negative qualifier
is appended as plain text.

Usage
-----
::

    instruction = build_instruction("Make it look cinematic.")
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Fixed instruction sections.
# Image order matters: the gateway always sends the selfie first and the
# template second, and these texts refer to them as Image 1 and Image 2.
# ---------------------------------------------------------------------------

FACE_SWAP_INSTRUCTION = (
    "You are performing a face swap. Image 1 is a photo of a person. "
    "Image 2 is a template photo. Create a new photorealistic image that is "
    "identical to Image 2, but with the face of the person from Image 1. "
    "Keep the outfit, pose, body, hairstyle, background and lighting of "
    "Image 2 exactly. Preserve the facial identity, skin tone and features of "
    "the person from Image 1 and blend the face naturally, matching the "
    "lighting, angle and colour grading of Image 2."
)

USER_PROMPT_LABEL = "Additional instructions:"

NEGATIVE_QUALIFIER = (
    "Avoid: low quality, bad quality, sketches, cartoon, low resolution, "
    "distorted face, extra limbs, visible seams."
)


def build_instruction(user_prompt: str | None = None) -> str:
    """Compile the full text instruction sent to the provider.

    Args:
        user_prompt: Optional free-text prompt from the user.  Surrounding
            whitespace is stripped; a blank prompt is treated as absent.

    Returns:
        Instruction sections separated by blank lines.
    """
    sections = [FACE_SWAP_INSTRUCTION]

    extra = (user_prompt or "").strip()
    if extra:
        sections.append(f"{USER_PROMPT_LABEL} {extra}")

    sections.append(NEGATIVE_QUALIFIER)
    return "\n\n".join(sections)
