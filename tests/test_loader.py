"""Tests for deck fetching and load errors."""
from __future__ import annotations

import httpx
import pytest

from kana_trainer.errors import DeckEmptyError, DeckLoadError, FetchError
from kana_trainer.loader import fetch_deck_text, is_url, load_deck, parse_loaded_text
from kana_trainer.models import DeckProfile

DECK_URL = "https://decks.example.test/kana.txt"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestIsUrl:
    def test_urls(self):
        assert is_url("http://x/kana.txt")
        assert is_url("https://x/kana.txt")
        assert not is_url("/tmp/kana.txt")
        assert not is_url("kana.txt")


class TestFetchLocal:
    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path, animals_deck):
        f = tmp_path / "animals.txt"
        f.write_text(animals_deck, encoding="utf-8")
        assert await fetch_deck_text(str(f)) == animals_deck

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(FetchError) as exc:
            await fetch_deck_text(str(tmp_path / "nope.txt"))
        assert exc.value.status == 404
        assert "nope.txt" in str(exc.value)


class TestFetchUrl:
    @pytest.mark.asyncio
    async def test_success(self, animals_deck):
        def handler(request):
            assert str(request.url) == DECK_URL
            return httpx.Response(200, text=animals_deck)

        async with _client(handler) as client:
            assert await fetch_deck_text(DECK_URL, client=client) == animals_deck

    @pytest.mark.asyncio
    async def test_non_2xx(self):
        async with _client(lambda request: httpx.Response(404, text="not here")) as client:
            with pytest.raises(FetchError) as exc:
                await fetch_deck_text(DECK_URL, client=client)
        assert exc.value.status == 404
        assert "(404)" in str(exc.value)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(FetchError) as exc:
                await fetch_deck_text(DECK_URL, client=client)
        assert exc.value.status is None
        assert "connection refused" in str(exc.value)


class TestParseLoadedText:
    def test_empty_deck(self):
        with pytest.raises(DeckEmptyError):
            parse_loaded_text("# Only\n\n# ====\n", source="empty.txt")

    def test_only_junk(self):
        with pytest.raises(DeckEmptyError):
            parse_loaded_text("junk\nmore junk\n")

    def test_ok(self, animals_deck):
        assert len(parse_loaded_text(animals_deck).entries) == 2


class TestLoadDeck:
    @pytest.mark.asyncio
    async def test_profile_file(self, kanji_profile):
        with open(kanji_profile.path, "w", encoding="utf-8") as f:
            f.write('# Nature\n"日","nichi|hi"\nkanji: "山", reading: "yama"\n')
        parsed = await load_deck(kanji_profile)
        assert [e.prompt for e in parsed.entries] == ["日", "山"]
        assert parsed.sections[0].title == "Nature"

    @pytest.mark.asyncio
    async def test_profile_url(self, animals_deck):
        profile = DeckProfile("animals", DECK_URL)
        async with _client(lambda request: httpx.Response(200, text=animals_deck)) as client:
            parsed = await load_deck(profile, client=client)
        assert len(parsed.entries) == 2

    @pytest.mark.asyncio
    async def test_errors_share_base(self, tmp_path):
        f = tmp_path / "blank.txt"
        f.write_text("\n\n", encoding="utf-8")
        with pytest.raises(DeckLoadError):
            await load_deck(DeckProfile("blank", str(f)))
        with pytest.raises(DeckLoadError):
            await load_deck(DeckProfile("missing", str(tmp_path / "missing.txt")))
