"""Tests for the DBC parser."""

import logging
from pathlib import Path

import pytest
from dbc_codec.config import CodecConfig
from dbc_codec.errors import SourceUnreadableError
from dbc_codec.parser.parser import DbcParser, load_file, parse_lines, parse_string
from dbc_codec.registry.registry import Registry


class TestParseString:
    """Tests for parsing database text."""

    def test_parse_sample(self, sample_dbc_text: str) -> None:
        """Test that all messages and signals are built."""
        result = parse_string(sample_dbc_text)

        assert [m.name for m in result.messages] == [
            "BMS_SOC_INFO",
            "EngineStatus",
            "Diagnostics",
        ]
        assert result.malformed_count == 0
        assert result.ignored_count > 0

    def test_message_fields(self, sample_dbc_text: str) -> None:
        """Test message header fields."""
        message = parse_string(sample_dbc_text).messages[0]

        assert message.frame_id == 2550589684
        assert message.can_id == 0x1806E8F4
        assert message.is_extended
        assert message.length == 8
        assert message.sender == "BMS"
        assert message.signal_names == ["SOC", "SOH", "PackCurrent"]

    def test_signal_fields(self, sample_dbc_text: str) -> None:
        """Test a fully specified signal."""
        message = parse_string(sample_dbc_text).messages[0]
        current = message.get_signal("PackCurrent")

        assert current is not None
        assert current.start_bit == 16
        assert current.bit_length == 16
        assert current.is_signed
        assert current.factor == pytest.approx(0.1)
        assert current.minimum == pytest.approx(-3276.8)
        assert current.maximum == pytest.approx(3276.7)
        assert current.unit == "A"
        assert current.message_name == "BMS_SOC_INFO"
        assert current.message_id == 2550589684

    def test_first_receiver_kept(self, sample_dbc_text: str) -> None:
        """Test that only the first receiver is stored."""
        soh = parse_string(sample_dbc_text).messages[0].get_signal("SOH")

        assert soh.receiver == "VCU"

    def test_single_bit_and_range_forms(self, sample_dbc_text: str) -> None:
        """Test the start-only and start-end signal forms."""
        engine = parse_string(sample_dbc_text).messages[1]

        running = engine.get_signal("Running")
        gear = engine.get_signal("Gear")
        assert (running.start_bit, running.bit_length) == (24, 1)
        assert (gear.start_bit, gear.bit_length) == (25, 4)
        assert gear.maximum == 15

    def test_offset_parsed(self, sample_dbc_text: str) -> None:
        """Test negative offsets."""
        temp = parse_string(sample_dbc_text).messages[1].get_signal("Temp")

        assert temp.offset == -40
        assert temp.unit == "degC"

    def test_canfd_message(self, sample_dbc_text: str) -> None:
        """Test a 64-byte message with a signal in its last byte."""
        diag = parse_string(sample_dbc_text).messages[2]

        assert diag.length == 64
        assert diag.get_signal("Checksum").start_bit == 504

    def test_comments(self, sample_dbc_text: str) -> None:
        """Test message and signal comments."""
        result = parse_string(sample_dbc_text)

        assert result.comment_for(256) == "Engine state broadcast"
        assert result.comment_for(256, "RPM") == "Crankshaft speed"
        assert result.comment_for(256, "Temp") is None
        assert result.comment_for(1024) is None

    def test_last_message_emitted(self) -> None:
        """Test that the final message is closed at end of input."""
        result = parse_lines(
            [
                "BO_ 1 First: 8 A",
                ' SG_ X : 0|8@1+ (1,0) [0|0] "" B',
                "BO_ 2 Last: 2 A",
                ' SG_ Y : 0|16@1+ (1,0) [0|0] "" B',
            ]
        )

        assert [m.name for m in result.messages] == ["First", "Last"]
        assert result.messages[1].signal_names == ["Y"]

    def test_message_without_signals(self) -> None:
        """Test that a header alone still defines a message."""
        result = parse_string("BO_ 5 Empty: 0 A\n")

        assert len(result.messages) == 1
        assert result.messages[0].signals == ()

    def test_hex_message_id(self) -> None:
        """Test hexadecimal ids."""
        result = parse_string("BO_ 0x123 Hex: 8 A\n")

        assert result.messages[0].frame_id == 0x123

    def test_empty_input(self) -> None:
        """Test parsing nothing."""
        result = parse_lines([])

        assert result.messages == []
        assert result.malformed == []


class TestMalformedLines:
    """Tests for line-level tolerance."""

    def test_bad_line_between_messages(self) -> None:
        """Test that a bad line between two messages leaves both registrable."""
        result = parse_string(
            "BO_ 256 First: 8 A\n"
            ' SG_ X : 0|8@1+ (1,0) [0|0] "" B\n'
            ' SG_ Broken : 8|8@1+ (1,0) [0|0 "" B\n'
            "\n"
            "BO_ 512 Second: 8 A\n"
            ' SG_ Y : 0|8@1+ (1,0) [0|0] "" B\n'
        )
        registry = Registry()
        registry.load(result)

        assert result.malformed_count == 1
        assert result.malformed[0].line_number == 3
        assert registry.by_id(256) is registry.by_name("First")
        assert registry.by_id(512) is registry.by_name("Second")
        assert registry.by_name("First").signal_names == ["X"]
        assert registry.by_name("Second").signal_names == ["Y"]

    def test_bad_number_skips_only_its_line(self) -> None:
        """Test that a bad factor rejects one signal and keeps the rest."""
        result = parse_string(
            "BO_ 1 Msg: 8 A\n"
            ' SG_ Good1 : 0|8@1+ (1,0) [0|0] "" B\n'
            ' SG_ Bad : 8|8@1+ (x,0) [0|0] "" B\n'
            ' SG_ Good2 : 16|8@1+ (1,0) [0|0] "" B\n'
        )

        assert result.messages[0].signal_names == ["Good1", "Good2"]
        assert result.malformed_count == 1
        assert result.malformed[0].line_number == 3
        assert "factor" in result.malformed[0].reason

    def test_motorola_rejected(self) -> None:
        """Test that big-endian signals are reported as malformed."""
        result = parse_string(
            "BO_ 1 Msg: 8 A\n"
            ' SG_ Big : 7|16@0+ (1,0) [0|0] "" B\n'
        )

        assert result.messages[0].signals == ()
        assert "big-endian" in result.malformed[0].reason

    def test_signal_before_any_message(self) -> None:
        """Test that orphan signals are rejected."""
        result = parse_string(' SG_ X : 0|8@1+ (1,0) [0|0] "" B\n')

        assert result.messages == []
        assert result.malformed_count == 1

    def test_malformed_header_closes_message(self) -> None:
        """Test that signals under a broken header do not join the previous message."""
        result = parse_string(
            "BO_ 1 Good: 8 A\n"
            ' SG_ X : 0|8@1+ (1,0) [0|0] "" B\n'
            "BO_ broken header\n"
            ' SG_ Y : 8|8@1+ (1,0) [0|0] "" B\n'
        )

        assert [m.name for m in result.messages] == ["Good"]
        assert result.messages[0].signal_names == ["X"]
        assert result.malformed_count == 2

    def test_signal_outside_payload(self) -> None:
        """Test that signals beyond the message length are rejected."""
        result = parse_string(
            "BO_ 1 Short: 1 A\n"
            ' SG_ X : 4|8@1+ (1,0) [0|0] "" B\n'
        )

        assert result.messages[0].signals == ()
        assert "exceed" in result.malformed[0].reason

    def test_overlapping_signal(self) -> None:
        """Test that the second of two overlapping signals is rejected."""
        result = parse_string(
            "BO_ 1 Msg: 8 A\n"
            ' SG_ A : 0|8@1+ (1,0) [0|0] "" B\n'
            ' SG_ B : 4|8@1+ (1,0) [0|0] "" B\n'
        )

        assert result.messages[0].signal_names == ["A"]
        assert "overlaps" in result.malformed[0].reason

    def test_reversed_range(self) -> None:
        """Test that start-end ranges must ascend."""
        result = parse_string(
            "BO_ 1 Msg: 8 A\n"
            ' SG_ A : 8-3@1+ (1,0) [0|0] "" B\n'
        )

        assert result.malformed_count == 1

    def test_reversed_limits(self) -> None:
        """Test that minimum above maximum is rejected."""
        result = parse_string(
            "BO_ 1 Msg: 8 A\n"
            ' SG_ A : 0|8@1+ (1,0) [10|5] "" B\n'
        )

        assert result.messages[0].signals == ()
        assert result.malformed_count == 1

    @pytest.mark.parametrize("length", ["65", "-1", "x"])
    def test_bad_message_length(self, length: str) -> None:
        """Test invalid message lengths."""
        result = parse_string(f"BO_ 1 Msg: {length} A\n")

        assert result.messages == []
        assert result.malformed_count == 1

    def test_malformed_lines_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that skipped lines are logged as warnings."""
        with caplog.at_level(logging.WARNING, logger="dbc_codec.parser.parser"):
            parse_string("BO_ 1 Msg\n")

        assert "Skipping line 1" in caplog.text


class TestParseFile:
    """Tests for reading database files."""

    def test_load_file(self, sample_dbc_file: Path) -> None:
        """Test parsing a file on disk."""
        result = load_file(sample_dbc_file)

        assert len(result.messages) == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that unreadable sources raise SourceUnreadableError."""
        missing = tmp_path / "missing.dbc"

        with pytest.raises(SourceUnreadableError) as exc_info:
            load_file(missing)

        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.original_error, OSError)

    def test_open_file_lines(self, sample_dbc_file: Path) -> None:
        """Test parsing straight from an open text file."""
        with open(sample_dbc_file, encoding="utf-8") as f:
            result = parse_lines(f)

        assert len(result.messages) == 3

    def test_read_error_while_iterating(self) -> None:
        """Test that a read failure mid-stream raises SourceUnreadableError."""

        def failing_lines():
            yield "BO_ 1 Msg: 8 A"
            raise OSError("device went away")

        with pytest.raises(SourceUnreadableError) as exc_info:
            parse_lines(failing_lines())

        assert "device went away" in str(exc_info.value)
        assert isinstance(exc_info.value.original_error, OSError)

    def test_missing_file_is_file_not_found(self, tmp_path: Path) -> None:
        """Test that SourceUnreadableError can be caught as FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_file(tmp_path / "missing.dbc")

    def test_directory_is_unreadable(self, tmp_path: Path) -> None:
        """Test that a directory path is rejected."""
        with pytest.raises(SourceUnreadableError):
            load_file(tmp_path)

    def test_unknown_encoding(self, sample_dbc_file: Path) -> None:
        """Test that an unknown encoding is reported as unreadable."""
        parser = DbcParser(CodecConfig(encoding="no-such-codec"))

        with pytest.raises(SourceUnreadableError):
            parser.parse_file(sample_dbc_file)

    def test_latin1_encoding(self, tmp_path: Path) -> None:
        """Test reading a database written in a legacy encoding."""
        path = tmp_path / "legacy.dbc"
        path.write_bytes(
            b"BO_ 1 Msg: 8 A\n"
            b' SG_ T : 0|8@1- (1,0) [-40|125] "\xb0C" B\n'
        )

        result = DbcParser(CodecConfig(encoding="latin-1")).parse_file(path)

        assert result.messages[0].get_signal("T").unit == "°C"
