"""Unit tests for server-sent-event decoding."""

import pytest

from src.parsing.stream import collect_stream_text, decode_sse_line


async def _chunks(*items):
    for item in items:
        yield item


class TestDecodeSseLine:
    """Test classification of single stream lines."""

    def test_token_frame(self):
        """Test that a token frame yields its text."""
        frame = decode_sse_line('data: {"token":"["}')

        assert frame.kind == "token"
        assert frame.text == "["

    def test_flowise_event_token(self):
        """Test the Flowise event-format token frame."""
        frame = decode_sse_line('data: {"event":"token","data":"Hello"}')

        assert frame.kind == "token"
        assert frame.text == "Hello"

    def test_done_sentinel(self):
        """Test that [DONE] ends the stream."""
        assert decode_sse_line("data: [DONE]").kind == "done"

    def test_flowise_end_event(self):
        """Test that the Flowise end event ends the stream."""
        assert decode_sse_line('data: {"event":"end","data":"[DONE]"}').kind == "done"

    @pytest.mark.parametrize(
        "line",
        ["", "   ", ": keep-alive", "event: token", "id: 7", "retry: 1000", "message:",
         'data: {"event":"start","data":""}', 'data: {"event":"metadata","data":{"chatId":"1"}}'],
    )
    def test_lines_without_text(self, line):
        """Test that control lines and non-token events are skipped."""
        assert decode_sse_line(line).kind == "skip"

    def test_non_json_data_is_raw(self):
        """Test that non-JSON data is classified as raw text."""
        frame = decode_sse_line("data: plain words")

        assert frame.kind == "raw"
        assert frame.text == "plain words"

    def test_bare_text_line_is_raw(self):
        """Test that a line without a field name is raw text."""
        frame = decode_sse_line("just a token")

        assert frame.kind == "raw"
        assert frame.text == "just a token"

    def test_carriage_return_stripped(self):
        """Test that CRLF line endings are handled."""
        assert decode_sse_line('data: {"token":"x"}\r').text == "x"

    def test_json_string_token(self):
        """Test that a JSON string frame is a token."""
        frame = decode_sse_line('data: "quoted"')

        assert frame.kind == "token"
        assert frame.text == "quoted"

    def test_data_without_space(self):
        """Test a data field with no space after the colon."""
        assert decode_sse_line('data:{"token":"y"}').text == "y"


class TestCollectStreamText:
    """Test buffering of a whole stream."""

    @pytest.mark.asyncio
    async def test_concatenates_tokens_until_done(self):
        """Test that tokens are concatenated in arrival order."""
        text = await collect_stream_text(
            _chunks(
                b'data: {"token":"["}\n',
                b'data: {"token":"{\\"title\\":\\"T\\"}"}\n',
                b'data: {"token":"]"}\n',
                b"data: [DONE]\n",
            )
        )

        assert text == '[{"title":"T"}]'

    @pytest.mark.asyncio
    async def test_ignores_frames_after_done(self):
        """Test that frames after the end marker are ignored."""
        text = await collect_stream_text(
            _chunks(b'data: {"token":"a"}\n', b"data: [DONE]\n", b'data: {"token":"b"}\n')
        )

        assert text == "a"

    @pytest.mark.asyncio
    async def test_lines_split_across_chunks(self):
        """Test lines split across chunk boundaries."""
        text = await collect_stream_text(
            _chunks(b'data: {"tok', b'en":"ab"}\ndata: {"token"', b':"cd"}\n\n')
        )

        assert text == "abcd"

    @pytest.mark.asyncio
    async def test_multibyte_character_split_across_chunks(self):
        """Test a UTF-8 character split across chunks."""
        encoded = 'data: {"token":"jalapeño"}\n'.encode("utf-8")
        split_at = encoded.index("ñ".encode("utf-8")) + 1

        text = await collect_stream_text(_chunks(encoded[:split_at], encoded[split_at:]))

        assert text == "jalapeño"

    @pytest.mark.asyncio
    async def test_final_line_without_newline(self):
        """Test that a final line without a newline is processed."""
        text = await collect_stream_text(_chunks('data: {"token":"x"}\n', 'data: {"token":"y"}'))

        assert text == "xy"

    @pytest.mark.asyncio
    async def test_raw_frames_appended_by_default(self):
        """Test that raw frames are appended in lenient mode."""
        text = await collect_stream_text(
            _chunks('data: {"token":"a"}\n', "data: b\n", 'data: {"token":"c"}\n'),
            strict_frames=False,
        )

        assert text == "abc"

    @pytest.mark.asyncio
    async def test_raw_frames_dropped_in_strict_mode(self):
        """Test that raw frames are dropped in strict mode."""
        text = await collect_stream_text(
            _chunks('data: {"token":"a"}\n', "data: b\n", 'data: {"token":"c"}\n'),
            strict_frames=True,
        )

        assert text == "ac"

    @pytest.mark.asyncio
    async def test_flowise_event_stream(self):
        """Test a full Flowise event-format stream."""
        text = await collect_stream_text(
            _chunks(
                "message:\n",
                'data: {"event":"start","data":""}\n\n',
                "message:\n",
                'data: {"event":"token","data":"Keto "}\n\n',
                "message:\n",
                'data: {"event":"token","data":"tacos"}\n\n',
                "message:\n",
                'data: {"event":"end","data":"[DONE]"}\n\n',
            )
        )

        assert text == "Keto tacos"

    @pytest.mark.asyncio
    async def test_empty_stream(self):
        """Test that an empty stream yields empty text."""
        assert await collect_stream_text(_chunks()) == ""
