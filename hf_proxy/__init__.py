"""OpenAI-compatible proxy for the Hugging Face Inference API."""

__version__ = "1.0.0"
