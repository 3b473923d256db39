"""rag_chat: conversational retrieval-augmented generation over uploaded PDFs."""

__version__ = "0.1.0"
