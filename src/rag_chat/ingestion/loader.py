"""Document loaders: thin wrappers around LangChain document loaders."""

from __future__ import annotations

from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader


def load_pdf_text(path: str | Path) -> str:
    """Extract the text of a PDF file, pages joined by newlines."""
    pages = PyPDFLoader(str(path)).load()
    return "\n".join(page.page_content for page in pages)
