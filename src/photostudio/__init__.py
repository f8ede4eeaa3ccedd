"""AI Photo Studio - face-swap a selfie onto a template image with Gemini."""

__version__ = "0.1.0"
