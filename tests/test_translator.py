"""Tests for the translator: single requests, batching, catalogs and file output."""

import asyncio
import json
import logging
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import openai
import pytest

from conftest import completion, make_client
from web_i18n.config import LLMConfig, MissingCredentialError, TranslationConfig
from web_i18n.translator import Translator, locale_path

REQUEST = httpx.Request("POST", "https://api.test/v1/chat/completions")


def _replies(mapping: dict[str, str]):
    async def reply(text: str) -> SimpleNamespace:
        return completion(mapping.get(text, f"[{text}]"))

    return reply


async def _failing(text: str) -> SimpleNamespace:
    if text.startswith("bad"):
        raise openai.APIConnectionError(request=REQUEST)
    return completion(f"ok:{text}")


class TestTranslateOne:
    """Tests for Translator.translate_one."""

    @pytest.mark.asyncio
    async def test_returns_completion(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        client = make_client(_replies({"Hello": "你好"}))
        translator = Translator(llm_config, translation_config, client=client)

        assert await translator.translate_one("Hello", "zh-CN") == "你好"

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Simplified Chinese" in kwargs["messages"][0]["content"]
        assert "{variables}" in kwargs["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_unknown_language_tag_passes_through(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        client = make_client(_replies({}))
        translator = Translator(llm_config, translation_config, client=client)

        await translator.translate_one("Hello", "xx-YY")

        content = client.chat.completions.create.await_args.kwargs["messages"][0]["content"]
        assert "to xx-YY." in content

    @pytest.mark.asyncio
    async def test_strips_one_layer_of_quotes(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        client = make_client(_replies({"Hello": '"\'Bonjour\'"'}))
        translator = Translator(llm_config, translation_config, client=client)

        assert await translator.translate_one("Hello", "fr-FR") == "'Bonjour'"

    @pytest.mark.asyncio
    async def test_transport_error_returns_source(
        self,
        llm_config: LLMConfig,
        translation_config: TranslationConfig,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        translator = Translator(llm_config, translation_config, client=make_client(_failing))

        with caplog.at_level(logging.WARNING):
            result = await translator.translate_one("bad input text", "de-DE")

        assert result == "bad input text"
        assert translator.context.failures == 1
        assert "bad input text" in caplog.text
        assert "de-DE" in caplog.text

    @pytest.mark.asyncio
    async def test_http_status_error_returns_source(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        async def reply(text: str) -> SimpleNamespace:
            raise openai.InternalServerError(
                "server exploded",
                response=httpx.Response(500, request=REQUEST),
                body=None,
            )

        translator = Translator(llm_config, translation_config, client=make_client(reply))
        assert await translator.translate_one("Hello", "ja-JP") == "Hello"

    @pytest.mark.asyncio
    async def test_malformed_response_returns_source(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        async def reply(text: str) -> SimpleNamespace:
            return SimpleNamespace(choices=[])

        translator = Translator(llm_config, translation_config, client=make_client(reply))
        assert await translator.translate_one("Hello", "ja-JP") == "Hello"

    @pytest.mark.asyncio
    async def test_empty_completion_returns_source(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        async def reply(text: str) -> SimpleNamespace:
            return completion(None)

        translator = Translator(llm_config, translation_config, client=make_client(reply))
        assert await translator.translate_one("Hello", "ja-JP") == "Hello"

    @pytest.mark.asyncio
    async def test_missing_credential_raises_before_request(
        self, translation_config: TranslationConfig
    ) -> None:
        client = make_client(_replies({}))
        translator = Translator(LLMConfig(api_key=""), translation_config, client=client)

        with pytest.raises(MissingCredentialError):
            await translator.translate_one("Hello", "zh-CN")
        client.chat.completions.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_config_logged_once_per_instance(
        self, llm_config: LLMConfig, translation_config: TranslationConfig
    ) -> None:
        first = Translator(llm_config, translation_config, client=make_client(_replies({})))
        second = Translator(llm_config, translation_config, client=make_client(_replies({})))

        await first.translate_one("Hello", "zh-CN")

        assert first.context.config_logged is True
        assert second.context.config_logged is False


class TestTranslateBatch:
    """Tests for Translator.translate_batch."""

    @pytest.mark.asyncio
    async def test_order_preserved_with_failures(self, llm_config: LLMConfig) -> None:
        settings = TranslationConfig(batch_size=2, delay_ms=0)
        translator = Translator(llm_config, settings, client=make_client(_failing))
        texts = ["one", "bad two", "three", "bad four", "five"]

        result = await translator.translate_batch(texts, "fr-FR")

        assert result == ["ok:one", "bad two", "ok:three", "bad four", "ok:five"]

    @pytest.mark.asyncio
    async def test_delay_between_chunks_only(self, llm_config: LLMConfig) -> None:
        settings = TranslationConfig(batch_size=2, delay_ms=1200)
        translator = Translator(llm_config, settings, client=make_client(_replies({})))

        with patch("web_i18n.translator.asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await translator.translate_batch(["a1", "b2", "c3", "d4", "e5"], "fr-FR")

        assert len(result) == 5
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.2)

    @pytest.mark.asyncio
    async def test_chunk_runs_concurrently(self, llm_config: LLMConfig) -> None:
        active = 0
        peak = 0

        async def reply(text: str) -> SimpleNamespace:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return completion(text.upper())

        settings = TranslationConfig(batch_size=3, delay_ms=0)
        translator = Translator(llm_config, settings, client=make_client(reply))

        result = await translator.translate_batch(["a", "b", "c", "d", "e", "f"], "de-DE")

        assert result == ["A", "B", "C", "D", "E", "F"]
        assert peak == 3

    @pytest.mark.asyncio
    async def test_empty_input(self, llm_config: LLMConfig) -> None:
        translator = Translator(llm_config, client=make_client(_replies({})))
        assert await translator.translate_batch([], "de-DE") == []


class TestTranslateAll:
    """Tests for Translator.translate_all."""

    @pytest.mark.asyncio
    async def test_keys_and_order_preserved(self, llm_config: LLMConfig) -> None:
        settings = TranslationConfig(target_languages=["fr-FR", "de-DE"], batch_size=2, delay_ms=0)
        translator = Translator(llm_config, settings, client=make_client(_replies({})))
        catalog = {
            "a/locales/en-US/app.json": {"z": "Zebra", "a": "Apple", "m": "Mango"},
            "b/locales/en-US/empty.json": {},
        }
        progress = AsyncMock()

        results = await translator.translate_all(catalog, progress_callback=progress)

        assert list(results) == ["fr-FR", "de-DE"]
        for language in ("fr-FR", "de-DE"):
            files = results[language]
            assert list(files) == ["a/locales/en-US/app.json"]
            assert list(files["a/locales/en-US/app.json"].items()) == [
                ("z", "[Zebra]"),
                ("a", "[Apple]"),
                ("m", "[Mango]"),
            ]
        assert progress.await_count == 2
        progress.assert_awaited_with(3)


class TestLocalePath:
    """Tests for locale_path."""

    def test_replaces_locale_segment(self) -> None:
        path = locale_path("apps/web/src/locales/en-US/index.json", "en-US", "ja-JP")
        assert str(path) == "apps/web/src/locales/ja-JP/index.json"

    def test_replaces_last_segment_only(self) -> None:
        path = locale_path("en-US/locales/en-US/index.json", "en-US", "ko-KR")
        assert str(path) == "en-US/locales/ko-KR/index.json"

    def test_file_name_is_not_touched(self) -> None:
        path = locale_path("locales/en-US/en-US.json", "en-US", "fr-FR")
        assert str(path) == "locales/fr-FR/en-US.json"

    def test_inserts_tag_without_locale_segment(self) -> None:
        assert str(locale_path("foo.json", "en-US", "zh-CN")) == "zh-CN/foo.json"


class TestApplyTranslations:
    """Tests for Translator.apply_translations."""

    def test_writes_message_catalogs(self, tmp_path: Path, llm_config: LLMConfig) -> None:
        translator = Translator(llm_config)
        results = {
            "zh-CN": {"src/locales/en-US/app.json": {"title": "我的应用", "nav.home": "首页"}},
            "ja-JP": {"src/locales/en-US/app.json": {"title": "マイアプリ", "nav.home": "ホーム"}},
        }

        written = translator.apply_translations(results, tmp_path)

        assert len(written) == 2
        zh = tmp_path / "src/locales/zh-CN/app.json"
        assert zh.parent.parent == (tmp_path / "src/locales/en-US/app.json").parent.parent
        data = json.loads(zh.read_text(encoding="utf-8"))
        assert data == {"title": {"message": "我的应用"}, "nav.home": {"message": "首页"}}
        assert "我的应用" in zh.read_text(encoding="utf-8")

    def test_overwrites_existing_files(self, tmp_path: Path, llm_config: LLMConfig) -> None:
        target = tmp_path / "locales/de-DE/app.json"
        target.parent.mkdir(parents=True)
        target.write_text(json.dumps({"old": {"message": "Alt"}}), encoding="utf-8")

        Translator(llm_config).apply_translations(
            {"de-DE": {"locales/en-US/app.json": {"new": "Neu"}}}, tmp_path
        )

        assert json.loads(target.read_text(encoding="utf-8")) == {"new": {"message": "Neu"}}

    def test_write_failure_does_not_stop_others(
        self, tmp_path: Path, llm_config: LLMConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "locales").mkdir()
        (tmp_path / "locales/ja-JP").write_text("not a directory", encoding="utf-8")
        results = {
            "ja-JP": {"locales/en-US/app.json": {"title": "タイトル"}},
            "ko-KR": {"locales/en-US/app.json": {"title": "제목"}},
        }

        with caplog.at_level(logging.ERROR):
            written = Translator(llm_config).apply_translations(results, tmp_path)

        assert written == [tmp_path / "locales/ko-KR/app.json"]
        assert "Error writing" in caplog.text


class TestEndToEnd:
    """Catalog in, localized files out, with the service mocked."""

    @pytest.mark.asyncio
    async def test_single_file_single_language(
        self, tmp_path: Path, llm_config: LLMConfig
    ) -> None:
        settings = TranslationConfig(target_languages=["zh-CN"], delay_ms=0)
        translator = Translator(llm_config, settings, client=make_client(_replies({"Hello": "你好"})))

        results = await translator.translate_all({"foo.json": {"greeting": "Hello"}})
        written = translator.apply_translations(results, tmp_path)

        assert written == [tmp_path / "zh-CN/foo.json"]
        data = json.loads(written[0].read_text(encoding="utf-8"))
        assert data == {"greeting": {"message": "你好"}}


def _sdk_client(handler) -> openai.AsyncOpenAI:
    """Real SDK client whose HTTP traffic is served by ``handler``."""
    return openai.AsyncOpenAI(
        base_url="https://api.test/v1",
        api_key="test-key",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestServiceResponses:
    """Responses decoded by the SDK itself rather than by a fake client."""

    @pytest.mark.asyncio
    async def test_unparsable_json_body_falls_back(
        self, llm_config: LLMConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"content-type": "application/json"}, content=b"<html>oops"
            )

        settings = TranslationConfig(batch_size=10, delay_ms=0)
        translator = Translator(llm_config, settings, client=_sdk_client(handler))

        with caplog.at_level(logging.WARNING):
            result = await translator.translate_batch(["Hello", "World"], "zh-CN")

        assert result == ["Hello", "World"]
        assert translator.context.requests == 2
        assert translator.context.failures == 2
        assert "Translation error" in caplog.text

    @pytest.mark.asyncio
    async def test_error_status_falls_back(self, llm_config: LLMConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": {"message": "overloaded"}})

        translator = Translator(llm_config, client=_sdk_client(handler))

        assert await translator.translate_one("Hello", "ja-JP") == "Hello"

    @pytest.mark.asyncio
    async def test_valid_completion_through_sdk(self, llm_config: LLMConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/chat/completions"
            assert request.headers["authorization"] == "Bearer test-key"
            return httpx.Response(
                200,
                json={
                    "id": "cmpl-1",
                    "object": "chat.completion",
                    "created": 0,
                    "model": "test-model",
                    "choices": [
                        {
                            "index": 0,
                            "finish_reason": "stop",
                            "message": {"role": "assistant", "content": '"你好"'},
                        }
                    ],
                },
            )

        translator = Translator(llm_config, client=_sdk_client(handler))

        assert await translator.translate_one("Hello", "zh-CN") == "你好"
