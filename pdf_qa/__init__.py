"""
PDF Q&A Backend Application

Upload PDFs, ask questions in any language and get answers grounded in the
uploaded text.

Features:
- In-memory document store with concurrent reads
- PDF text extraction with PyPDF2
- Google Gemini or Groq chat models via LangChain
- Automatic language detection and answer translation
- Fallback answers when the model is unavailable
- Structured logging
- Health monitoring
"""

__version__ = "1.0.0"
__author__ = "PDF Q&A Team"
__description__ = "A multilingual PDF question-answering backend"
