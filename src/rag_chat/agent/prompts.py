"""Prompt template for the generate step.

The wording is the widely used ``rlm/rag-prompt`` template, pinned here
instead of being pulled from the LangChain hub at startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.prompts import ChatPromptTemplate

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.messages import BaseMessage

RAG_TEMPLATE = """\
You are an assistant for question-answering tasks. Use the following pieces \
of retrieved context to answer the question. If you don't know the answer, \
just say that you don't know. Use three sentences maximum and keep the \
answer concise.
Question: {question}
Context: {context}
Answer:"""

RAG_PROMPT = ChatPromptTemplate.from_messages([("human", RAG_TEMPLATE)])


def format_context(documents: list[Document]) -> str:
    """Join document texts with newlines, keeping retrieval order."""
    return "\n".join(doc.page_content for doc in documents)


def build_rag_prompt(question: str, documents: list[Document]) -> list[BaseMessage]:
    """Assemble the model input for one generate step.

    An empty *documents* list yields an empty context block.
    """
    return RAG_PROMPT.format_messages(question=question, context=format_context(documents))
