"""
Chat relay: a small FastAPI backend that forwards chat messages to OpenAI,
Google Gemini or the Hugging Face Inference API and relays the reply.
Layout: api/, core/, providers/, schemas/, services/.
"""

__all__ = ["__version__"]
__version__ = "1.0.0"
