"""Unit tests for the chat pipeline.

All tests run without OpenAI or Chroma by injecting the in-memory fakes
from ``conftest.py`` through a :class:`ClientBundle`.
"""

from __future__ import annotations

from typing import Any

import pytest

from wellness_rag.chat.models import ConversationMessage
from wellness_rag.chat.pipeline import ChatPipeline, ClientBundle, extract_query
from wellness_rag.chat.prompts import (
    SYSTEM_TEMPLATE,
    assemble_context,
    build_prompt_messages,
    build_system_message,
)
from wellness_rag.chat.state import create_initial_state
from wellness_rag.errors import BadRequest, ErrorKind, ProviderError
from wellness_rag.retry import RetryPolicy

_NO_WAIT = RetryPolicy(max_attempts=3, initial_delay=0.0, max_delay=0.0)


def _user(content: str) -> ConversationMessage:
    return ConversationMessage(role="user", content=content)


@pytest.fixture()
def pipeline(fake_embedder: Any, fake_generator: Any, fake_store: Any) -> ChatPipeline:
    clients = ClientBundle(embedder=fake_embedder, generator=fake_generator, store=fake_store)
    return ChatPipeline(clients, top_k=5, retry_policy=_NO_WAIT)


# ═══════════════════════════════════════════════════════════════════════
# Prompts
# ═══════════════════════════════════════════════════════════════════════


class TestPrompts:
    def test_assemble_context_joins_with_blank_line(self) -> None:
        assert assemble_context(["A.", "B.", "C."]) == "A.\n\nB.\n\nC."

    def test_assemble_context_empty(self) -> None:
        assert assemble_context([]) == ""

    def test_system_message_embeds_context(self) -> None:
        msg = build_system_message("Cucumber reduces bloating.")
        assert msg.role == "system"
        assert "CONTEXT:\nCucumber reduces bloating.\n" in msg.content
        assert "women's health" in msg.content

    def test_context_with_braces_is_inserted_verbatim(self) -> None:
        msg = build_system_message("use {curly} braces")
        assert "use {curly} braces" in msg.content

    def test_prompt_messages_prepend_system(self) -> None:
        history = [_user("hi"), ConversationMessage(role="assistant", content="hello"), _user("q")]
        prompt = build_prompt_messages("ctx", history)
        assert [m.role for m in prompt] == ["system", "user", "assistant", "user"]
        assert prompt[1:] == history

    def test_template_has_single_placeholder(self) -> None:
        assert SYSTEM_TEMPLATE.count("{context}") == 1


# ═══════════════════════════════════════════════════════════════════════
# Query extraction
# ═══════════════════════════════════════════════════════════════════════


class TestExtractQuery:
    def test_uses_last_message(self) -> None:
        msgs = [_user("first"), ConversationMessage(role="assistant", content="a"), _user("last")]
        assert extract_query(msgs) == "last"

    @pytest.mark.parametrize(
        "messages",
        [
            None,
            [],
            [_user("")],
            [_user("   ")],
            [_user("ok"), _user("")],
            [ConversationMessage(role="user")],
            [_user("ok"), ConversationMessage(role="user", content=None)],
        ],
    )
    def test_missing_content_is_bad_request(
        self, messages: list[ConversationMessage] | None
    ) -> None:
        with pytest.raises(BadRequest):
            extract_query(messages)


# ═══════════════════════════════════════════════════════════════════════
# Pipeline
# ═══════════════════════════════════════════════════════════════════════


class TestChatPipeline:
    @pytest.mark.asyncio
    async def test_empty_messages_make_no_remote_calls(
        self, pipeline: ChatPipeline, fake_embedder: Any, fake_generator: Any, fake_store: Any
    ) -> None:
        with pytest.raises(BadRequest):
            await pipeline.run([])
        assert fake_embedder.calls == []
        assert fake_store.search_calls == []
        assert fake_generator.calls == []

    @pytest.mark.asyncio
    async def test_bloating_scenario(
        self, pipeline: ChatPipeline, fake_embedder: Any, fake_generator: Any, fake_store: Any
    ) -> None:
        fake_store.hits = ["Cucumber reduces bloating.", "Stay hydrated."]
        fake_generator.reply = "Try cucumber and water."

        answer = await pipeline.run([_user("What helps with bloating?")])

        assert answer == "Try cucumber and water."
        assert fake_embedder.calls == ["What helps with bloating?"]
        assert fake_store.search_calls[0][1] == 5

        (prompt,) = fake_generator.calls
        assert len(prompt) == 2
        assert prompt[0].role == "system"
        assert prompt[0].content == build_system_message(
            "Cucumber reduces bloating.\n\nStay hydrated."
        ).content
        assert prompt[1] == _user("What helps with bloating?")

    @pytest.mark.asyncio
    async def test_search_receives_query_vector(
        self, pipeline: ChatPipeline, fake_embedder: Any, fake_store: Any
    ) -> None:
        await pipeline.run([_user("abc")])
        vector, _ = fake_store.search_calls[0]
        assert vector == [3.0, 1.0, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_store_failure_degrades_to_empty_context(
        self, pipeline: ChatPipeline, fake_generator: Any, fake_store: Any
    ) -> None:
        fake_store.hits = ["never returned"]
        fake_store.fail_search = True

        answer = await pipeline.run([_user("Is fasting good for women?")])

        assert answer == fake_generator.reply
        (prompt,) = fake_generator.calls
        assert prompt[0].content == build_system_message("").content
        assert "never returned" not in prompt[0].content

    @pytest.mark.asyncio
    async def test_store_failure_is_logged(
        self, pipeline: ChatPipeline, fake_store: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        fake_store.fail_search = True
        with caplog.at_level("WARNING", logger="wellness_rag.chat.pipeline"):
            await pipeline.run([_user("q")])
        assert any("without context" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_transient_embedding_error_is_retried(
        self, pipeline: ChatPipeline, fake_embedder: Any, fake_generator: Any
    ) -> None:
        fake_embedder.errors = [ProviderError("timeout", kind=ErrorKind.TRANSIENT)]
        await pipeline.run([_user("q")])
        assert len(fake_embedder.calls) == 2
        assert len(fake_generator.calls) == 1

    @pytest.mark.asyncio
    async def test_embedding_failure_is_fatal(
        self, pipeline: ChatPipeline, fake_embedder: Any, fake_generator: Any, fake_store: Any
    ) -> None:
        fake_embedder.errors = [ProviderError("bad key", kind=ErrorKind.FATAL)]
        with pytest.raises(ProviderError):
            await pipeline.run([_user("q")])
        assert fake_store.search_calls == []
        assert fake_generator.calls == []

    @pytest.mark.asyncio
    async def test_rate_limited_generation_exhausts_and_raises(
        self, pipeline: ChatPipeline, fake_generator: Any
    ) -> None:
        fake_generator.errors = [
            ProviderError("Rate limit reached", kind=ErrorKind.RATE_LIMITED) for _ in range(3)
        ]
        with pytest.raises(ProviderError) as exc_info:
            await pipeline.run([_user("q")])
        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert len(fake_generator.calls) == 3

    @pytest.mark.asyncio
    async def test_conversation_order_is_preserved(
        self, pipeline: ChatPipeline, fake_generator: Any
    ) -> None:
        history = [
            _user("I feel tired."),
            ConversationMessage(role="assistant", content="How is your sleep?"),
            _user("Poor. What should I change?"),
        ]
        await pipeline.run(history)
        (prompt,) = fake_generator.calls
        assert prompt[1:] == history

    @pytest.mark.asyncio
    async def test_nodes_return_partial_state(
        self, pipeline: ChatPipeline, fake_store: Any
    ) -> None:
        fake_store.hits = ["one"]
        state = create_initial_state([_user("q")], "q")
        state.update(await pipeline.embed_query(state))
        retrieved = await pipeline.retrieve(state)
        assert retrieved == {"documents": ["one"], "retrieval_degraded": False}
