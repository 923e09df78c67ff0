from functools import lru_cache
from typing import Annotated, Any, AsyncIterator, TypedDict
from langchain_openai import ChatOpenAI
from langgraph.graph import StateGraph, START, END
from langgraph.graph.message import add_messages
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from core.config import MODELS, SEARCH_GROUPS
from core.domain import DomainEvent
from core.stream_adapter import adapt_events
from models import ChatRequest, Turn


SYSTEM_PROMPT = """You are a helpful assistant that answers the user's questions.
Mode: {group} ({description}).
The user's timezone is {timezone}. Answer in the language of the question.
"""

GROUP_INSTRUCTIONS = {
    'web': "Ground answers in current information from across the web and cite sources when you can.",
    'academic': "Prefer peer-reviewed sources and summarise findings carefully.",
    'youtube': "Focus on video content and point to relevant videos.",
    'reddit': "Focus on community discussion and point to relevant threads.",
    'analysis': "Work through code, stock and currency questions step by step.",
    'chat': "Talk with the user directly without searching.",
    'extreme': "Research the question in depth and combine multiple sources.",
    'buddy': "Act as a personal companion that remembers what the user shares.",
}


class ChatState(TypedDict):
    messages: Annotated[list[BaseMessage], add_messages]


def build_llm(model: str, temperature=0):
    kwargs: dict[str, Any] = {'model': model, 'streaming': True}
    # reasoning models reject a temperature setting
    if not model.startswith('o'):
        kwargs['temperature'] = temperature
    return ChatOpenAI(**kwargs)


def system_prompt(group_id: str, timezone: str) -> str:
    prompt = SYSTEM_PROMPT.format(
        group=group_id, description=SEARCH_GROUPS.get(group_id, ''), timezone=timezone,
    )
    return prompt + GROUP_INSTRUCTIONS.get(group_id, '')


def to_message(turn: Turn) -> BaseMessage:
    if turn.role == 'assistant':
        return AIMessage(content=turn.content)
    images = [a for a in turn.attachments if a.content_type.startswith('image/')]
    if not images:
        return HumanMessage(content=turn.content)
    parts: list[Any] = [{'type': 'text', 'text': turn.content}]
    parts += [{'type': 'image_url', 'image_url': {'url': a.url}} for a in images]
    return HumanMessage(content=parts)


def chatbot_factory(llm):
    async def chatbot(state: ChatState):
        ai_msg = await llm.ainvoke(state["messages"])
        return {'messages': [ai_msg]}
    return chatbot


@lru_cache(maxsize=16)
def build_chat_graph(model: str):
    llm = build_llm(model)
    graph_builder = StateGraph(ChatState)
    graph_builder.add_node('chatbot', chatbot_factory(llm))
    graph_builder.add_edge(START, 'chatbot')
    graph_builder.add_edge('chatbot', END)
    return graph_builder.compile(name="chat_graph")


class GraphStreamClient:
    """
    Streams a ChatRequest through the chat graph as domain events.
    """

    def stream(self, request: ChatRequest) -> AsyncIterator[DomainEvent]:
        params = request.params
        graph = build_chat_graph(MODELS.get(params.model_id, params.model_id))
        payload = {
            'messages': [
                SystemMessage(system_prompt(params.group_id, params.timezone)),
                *(to_message(t) for t in request.transcript),
            ],
        }
        config = {
            'run_name': f'chat-{request.request_id}',
            'metadata': {'user_id': params.user_id, 'group': params.group_id},
        }
        return adapt_events(graph.astream_events(payload, config=config, version='v2'))
