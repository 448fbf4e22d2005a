import json

import httpx
import pytest

from mindreader.deepgram_client import DeepgramClient
from mindreader.errors import TranscriptionServiceError

LISTEN_RESPONSE = {
    "results": {
        "channels": [{
            "alternatives": [{
                "transcript": "hello there",
                "words": [
                    {"word": "hello", "punctuated_word": "Hello", "speaker": 0},
                    {"word": "there", "punctuated_word": "there.", "speaker": 1},
                ],
            }]
        }]
    }
}

READ_RESPONSE = {
    "results": {
        "summary": {"text": "A short talk about jazz."},
        "topics": {"segments": [{"topics": [{"topic": "Music", "confidence_score": 0.9}]}]},
    }
}


def client_for(handler) -> DeepgramClient:
    return DeepgramClient(
        api_key="secret",
        base_url="https://deepgram.test/v1",
        model="nova-3",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fragment_transcription_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json=LISTEN_RESPONSE)

    client = client_for(handler)
    transcript = await client.transcribe(b"RIFFdata", "en")
    await client.aclose()

    request = seen["request"]
    assert request.url.path == "/v1/listen"
    assert request.headers["authorization"] == "Token secret"
    assert request.headers["content-type"] == "audio/wav"
    assert request.content == b"RIFFdata"
    assert request.url.params["diarize"] == "false"
    assert request.url.params["profanity_filter"] == "true"
    assert request.url.params["filler_words"] == "false"
    assert request.url.params["model"] == "nova-3"
    assert transcript.primary_text == "hello there"


@pytest.mark.asyncio
async def test_window_transcription_is_diarized_without_profanity_filter():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = request.url.params
        return httpx.Response(200, json=LISTEN_RESPONSE)

    client = client_for(handler)
    transcript = await client.transcribe(b"RIFF", "es", diarize=True)
    await client.aclose()

    assert seen["params"]["diarize"] == "true"
    assert seen["params"]["language"] == "es"
    assert "profanity_filter" not in seen["params"]
    assert [w.speaker for w in transcript.channels[0].alternatives[0].words] == [0, 1]


@pytest.mark.asyncio
async def test_transcription_http_error_raises_service_error():
    client = client_for(lambda request: httpx.Response(401, json={"err_msg": "bad key"}))
    with pytest.raises(TranscriptionServiceError):
        await client.transcribe(b"RIFF", "en")
    await client.aclose()


@pytest.mark.asyncio
async def test_transcription_invalid_body_raises_service_error():
    client = client_for(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(TranscriptionServiceError):
        await client.transcribe(b"RIFF", "en")
    await client.aclose()


@pytest.mark.asyncio
async def test_summarize_parses_summary_and_topic():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = request.url.params
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=READ_RESPONSE)

    client = client_for(handler)
    result = await client.summarize("long text about jazz")
    await client.aclose()

    assert seen["path"] == "/v1/read"
    assert seen["params"]["summarize"] == "v2"
    assert seen["body"] == {"text": "long text about jazz"}
    assert result.summary == "A short talk about jazz."
    assert result.topic == "Music"


@pytest.mark.asyncio
async def test_summarize_without_topics():
    client = client_for(lambda request: httpx.Response(200, json={"results": {"summary": {"text": "ok"}}}))
    result = await client.summarize("text")
    await client.aclose()
    assert result.summary == "ok"
    assert result.topic is None


def test_configured_reflects_api_key():
    assert not DeepgramClient(api_key="").configured
