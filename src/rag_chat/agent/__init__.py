"""
Agent: the retrieve → generate conversation graph built with LangGraph.

This module contains **zero** infrastructure dependencies.  Its
collaborators (embedding client, vector index, chat model, checkpoint
store) are injected, so the graph can be tested locally with fakes.

Public API
----------
- :class:`ConversationGraph`: checkpointed graph, ``await graph.invoke(thread_id, question)``.
- :func:`build_graph`: compile the bare LangGraph workflow.
- :class:`GraphState` / :class:`GraphStatus`: the state flowing through every node.
"""

from rag_chat.agent.graph import ConversationGraph, build_graph
from rag_chat.agent.state import GraphState, GraphStatus, create_initial_state

__all__ = [
    "ConversationGraph",
    "GraphState",
    "GraphStatus",
    "build_graph",
    "create_initial_state",
]
