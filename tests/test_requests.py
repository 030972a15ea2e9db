"""Tests for request frame encoding."""

import pytest

from bravia_serial.protocol.checksums import calculate_checksum
from bravia_serial.protocol.constants import RequestKind
from bravia_serial.protocol.requests import (
    ControlRequest,
    build_read_request,
    build_write_request,
)


class TestReadRequest:
    """Tests for read (query) requests."""

    def test_wire_bytes(self):
        """Test read request wire format."""
        request = build_read_request(0x05)
        assert request.kind == RequestKind.READ
        assert request.wire_bytes == bytes([0x83, 0x00, 0x05, 0xFF, 0xFF, 0x86])

    def test_power_status_query(self):
        """Test the power status query frame."""
        assert build_read_request(0x00).wire_bytes.hex() == "830000ffff81"

    @pytest.mark.parametrize("code", [-1, 256, 1.5, True])
    def test_invalid_function_code(self, code):
        """Test that non-byte function codes are rejected."""
        with pytest.raises(ValueError):
            build_read_request(code)


class TestWriteRequest:
    """Tests for write (control) requests."""

    def test_wire_bytes(self):
        """Test write request wire format."""
        request = build_write_request(0x05, [0x01, 0x14])
        # 8C 00 05 03 01 14 CS
        assert request.wire_bytes == bytes([0x8C, 0x00, 0x05, 0x03, 0x01, 0x14, 0xA9])

    def test_length_byte_counts_checksum(self):
        """Test that the length byte is payload length + 1."""
        wire = build_write_request(0x10, [0x02, 0x01, 0x03]).wire_bytes
        assert wire[3] == 4
        assert len(wire) == 4 + 3 + 1

    def test_empty_payload(self):
        """Test write request without data bytes."""
        wire = build_write_request(0x0F).wire_bytes
        assert wire == bytes([0x8C, 0x00, 0x0F, 0x01, 0x9C])

    def test_accepts_bytes_payload(self):
        """Test that bytes and list payloads encode identically."""
        assert build_write_request(0x00, b"\x01") == build_write_request(0x00, [0x01])

    def test_checksum_matches_preceding_bytes(self):
        """Test that the final byte is the checksum of the frame for varied payloads."""
        for payload in ([], [0x00], [0x01, 0x64], list(range(200))):
            wire = build_write_request(0x23, payload).wire_bytes
            assert calculate_checksum(wire[:-1]) == wire[-1]

    def test_payload_byte_out_of_range(self):
        """Test that payload bytes above 255 are rejected."""
        with pytest.raises(ValueError):
            build_write_request(0x05, [0x01, 0x100])

    def test_payload_too_long(self):
        """Test that payloads whose length byte would overflow are rejected."""
        build_write_request(0x05, bytes(254))
        with pytest.raises(ValueError):
            build_write_request(0x05, bytes(255))

    def test_repr(self):
        """Test string representation."""
        assert repr(build_read_request(0x00)) == "ControlRequest(READ, 0x00)"
        assert "payload=0114" in repr(build_write_request(0x05, [0x01, 0x14]))

    def test_frozen(self):
        """Test that requests are immutable."""
        request = ControlRequest(RequestKind.READ, 0x00)
        with pytest.raises(AttributeError):
            request.function_code = 1
