"""Tests for TransferPipeline."""

import asyncio

import pytest

from health_client.models import AudioPayload, ImageFile, MessageEntry, Sender
from health_client.transfer import (
    Transfer,
    TransferKind,
    image_transfer,
    text_transfer,
    voice_transfer,
)
from health_client.transfer.transfers import (
    IMAGE_ECHO,
    IMAGE_FALLBACK,
    TEXT_FALLBACK,
    VOICE_FALLBACK,
    VOICE_PLACEHOLDER,
)


def texts(conversation):
    return [(entry.sender, entry.text) for entry in conversation.snapshot()]


class TestTextTransfer:
    """Tests for the text path."""

    @pytest.mark.asyncio
    async def test_success_appends_echo_then_reply(self, pipeline, conversation, service):
        """Test user message first, reply after."""
        outcome = await pipeline.run(text_transfer(service, "I feel dizzy"))

        assert outcome.ok is True
        assert outcome.kind is TransferKind.TEXT
        assert texts(conversation) == [
            (Sender.USER, "I feel dizzy"),
            (Sender.ASSISTANT, "Test response"),
        ]

    @pytest.mark.asyncio
    async def test_user_message_visible_before_reply(
        self, pipeline, conversation, service, remote
    ):
        """Test the echo needs no placeholder and shows immediately."""
        remote.gates["/chat"] = asyncio.Event()
        task = asyncio.create_task(pipeline.run(text_transfer(service, "Hello")))
        await remote.wait_for(1)

        assert texts(conversation) == [(Sender.USER, "Hello")]
        assert conversation.processing_count() == 0

        remote.gates["/chat"].set()
        await task

    @pytest.mark.asyncio
    async def test_failure_appends_fallback(self, pipeline, conversation, service, remote):
        """Test fallback on server error, no retry."""
        remote.failing.add("/chat")

        outcome = await pipeline.run(text_transfer(service, "Hello"))

        assert outcome.ok is False
        assert outcome.error
        assert texts(conversation) == [
            (Sender.USER, "Hello"),
            (Sender.ASSISTANT, TEXT_FALLBACK),
        ]
        assert len(remote.requests_to("/chat")) == 1


class TestVoiceTransfer:
    """Tests for the voice path."""

    @pytest.mark.asyncio
    async def test_placeholder_while_in_flight(
        self, pipeline, conversation, service, remote
    ):
        """Test one processing entry while waiting."""
        remote.gates["/voice-to-text"] = asyncio.Event()
        task = asyncio.create_task(
            pipeline.run(voice_transfer(service, AudioPayload(data=b"audio")))
        )
        await remote.wait_for(1)

        snapshot = conversation.snapshot()
        assert len(snapshot) == 1
        assert snapshot[0].is_processing
        assert snapshot[0].text == VOICE_PLACEHOLDER

        remote.gates["/voice-to-text"].set()
        await task
        assert conversation.processing_count() == 0

    @pytest.mark.asyncio
    async def test_success_replaces_placeholder(self, pipeline, conversation, service):
        """Test transcription then reply, no placeholder left."""
        await pipeline.run(voice_transfer(service, AudioPayload(data=b"audio")))

        assert texts(conversation) == [
            (Sender.USER, "I have a headache"),
            (Sender.ASSISTANT, "Have you taken any medication?"),
        ]

    @pytest.mark.asyncio
    async def test_failure_adds_only_fallback(
        self, pipeline, conversation, service, remote
    ):
        """Test one assistant fallback, no user entry."""
        await conversation.append(MessageEntry.assistant("Hello!"))
        remote.unreachable.add("/voice-to-text")

        outcome = await pipeline.run(
            voice_transfer(service, AudioPayload(data=b"audio"))
        )

        assert outcome.ok is False
        assert texts(conversation) == [
            (Sender.ASSISTANT, "Hello!"),
            (Sender.ASSISTANT, VOICE_FALLBACK),
        ]

    @pytest.mark.asyncio
    async def test_missing_transcription_is_failure(
        self, pipeline, conversation, service, remote
    ):
        """Test a reply without transcribed_text falls back."""
        remote.replies["/voice-to-text"] = {"transcribed_text": "", "response": "?"}

        await pipeline.run(voice_transfer(service, AudioPayload(data=b"audio")))

        assert texts(conversation) == [(Sender.ASSISTANT, VOICE_FALLBACK)]


class TestImageTransfer:
    """Tests for the image path."""

    @pytest.mark.asyncio
    async def test_success(self, pipeline, conversation, service):
        """Test upload echo then analysis."""
        image = ImageFile(filename="scan.png", data=b"png")

        outcome = await pipeline.run(image_transfer(service, image))

        assert outcome.ok is True
        assert texts(conversation) == [
            (Sender.USER, IMAGE_ECHO),
            (Sender.ASSISTANT, "A small rash on the forearm."),
        ]

    @pytest.mark.asyncio
    async def test_failure(self, pipeline, conversation, service, remote):
        """Test image fallback."""
        remote.failing.add("/analyze-image")
        image = ImageFile(filename="scan.png", data=b"png")

        await pipeline.run(image_transfer(service, image))

        assert texts(conversation) == [(Sender.ASSISTANT, IMAGE_FALLBACK)]


class TestConcurrentTransfers:
    """Tests for interleaved transfers."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_first", [True, False])
    async def test_text_and_image_settle_independently(
        self, pipeline, conversation, service, remote, image_first
    ):
        """Test each transfer appends only its own result, in any order."""
        remote.gates["/chat"] = asyncio.Event()
        remote.gates["/analyze-image"] = asyncio.Event()
        image = ImageFile(filename="scan.png", data=b"png")

        text_task = asyncio.create_task(pipeline.run(text_transfer(service, "Hi")))
        image_task = asyncio.create_task(pipeline.run(image_transfer(service, image)))
        await remote.wait_for(2)
        assert pipeline.in_flight == 2
        assert conversation.processing_count() == 1

        order = [
            ("/analyze-image", image_task, [IMAGE_ECHO, "A small rash on the forearm."]),
            ("/chat", text_task, ["Test response"]),
        ]
        if not image_first:
            order.reverse()

        first_path, first_task, first_texts = order[0]
        remote.gates[first_path].set()
        await first_task

        snapshot_texts = [entry.text for entry in conversation.snapshot()]
        assert snapshot_texts[-len(first_texts):] == first_texts
        if first_path == "/chat":
            # the image placeholder belongs to the other transfer
            assert conversation.processing_count() == 1
        else:
            assert conversation.processing_count() == 0
            assert "Test response" not in snapshot_texts

        second_path, second_task, second_texts = order[1]
        remote.gates[second_path].set()
        await second_task

        final = [entry.text for entry in conversation.snapshot()]
        assert final[0] == "Hi"
        assert final[-len(second_texts):] == second_texts
        assert len(final) == 4
        assert conversation.processing_count() == 0

    @pytest.mark.asyncio
    async def test_each_transfer_removes_only_its_own_placeholder(
        self, pipeline, conversation, service, remote
    ):
        """Test the voice placeholder survives the image settling."""
        remote.gates["/voice-to-text"] = asyncio.Event()
        remote.gates["/analyze-image"] = asyncio.Event()

        voice_task = asyncio.create_task(
            pipeline.run(voice_transfer(service, AudioPayload(data=b"audio")))
        )
        image_task = asyncio.create_task(
            pipeline.run(
                image_transfer(service, ImageFile(filename="a.png", data=b"png"))
            )
        )
        await remote.wait_for(2)
        assert conversation.processing_count() == 2

        remote.gates["/analyze-image"].set()
        await image_task

        remaining = [e for e in conversation.snapshot() if e.is_processing]
        assert [e.text for e in remaining] == [VOICE_PLACEHOLDER]

        remote.failing.add("/voice-to-text")
        remote.gates["/voice-to-text"].set()
        await voice_task

        assert conversation.processing_count() == 0
        assert conversation.snapshot()[-1].text == VOICE_FALLBACK

    @pytest.mark.asyncio
    async def test_stray_placeholders_swept_when_idle(
        self, pipeline, conversation, service
    ):
        """Test leftovers are cleared once nothing is in flight."""
        await conversation.append(MessageEntry.placeholder("stale"))

        await pipeline.run(text_transfer(service, "Hello"))

        assert conversation.processing_count() == 0
        assert pipeline.in_flight == 0


class TestTransferErrors:
    """Tests for unexpected errors."""

    @pytest.mark.asyncio
    async def test_mapper_error_becomes_fallback(self, pipeline, conversation):
        """Test errors never propagate out of the pipeline."""

        async def send():
            return {"unexpected": True}

        def map_result(reply):
            raise KeyError("response")

        transfer = Transfer(
            kind=TransferKind.TEXT,
            send=send,
            map_result=map_result,
            fallback="fallback text",
            placeholder="working",
        )

        outcome = await pipeline.run(transfer)

        assert outcome.ok is False
        assert [e.text for e in conversation.snapshot()] == ["fallback text"]
