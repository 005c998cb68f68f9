"""Block splitting and header parsing tests."""

from __future__ import annotations

from datetime import datetime

from betledger.parsing import blocks
from conftest import PARLAY_BLOCK, STRAIGHT_BLOCK


def test_split_blocks_on_date_lines() -> None:
    paste = STRAIGHT_BLOCK + PARLAY_BLOCK
    result = blocks.split_blocks(paste)
    assert len(result) == 2
    assert result[0].text.startswith("Nov-29-2025")
    assert result[1].text.startswith("Nov-30-2025")


def test_split_blocks_drops_blank_and_footer_keeping_indices() -> None:
    paste = "TOTAL\n" + STRAIGHT_BLOCK + "\n" + PARLAY_BLOCK
    result = blocks.split_blocks(paste)
    assert [block.index for block in result] == [1, 2]


def test_leg_dates_do_not_start_a_block() -> None:
    result = blocks.split_blocks(PARLAY_BLOCK)
    assert len(result) == 1


def test_split_blocks_handles_windows_newlines() -> None:
    paste = (STRAIGHT_BLOCK + PARLAY_BLOCK).replace("\n", "\r\n")
    assert len(blocks.split_blocks(paste)) == 2


def test_parse_header_reads_ticket_and_label() -> None:
    header = blocks.parse_header(STRAIGHT_BLOCK)
    assert header is not None
    assert header.ticket_id == "612345678"
    assert header.type_label == "STRAIGHT BET"
    assert header.placed_at == datetime(2025, 11, 29, 12, 0)


def test_parse_header_without_time_line() -> None:
    assert blocks.parse_header("Nov-29-2025\nno time here\n$10/$9") is None


def test_parse_header_generates_ticket_id_when_missing() -> None:
    header = blocks.parse_header("Nov-29-2025\n3:15 PM\tSTRAIGHT BET\n$10/$9")
    assert header is not None
    assert header.type_label == "STRAIGHT BET"
    assert header.ticket_id.startswith("bet-")


def test_parse_slip_datetime() -> None:
    assert blocks.parse_slip_datetime("[Dec-07-2025 04:25 PM]") == datetime(2025, 12, 7, 16, 25)
    assert blocks.parse_slip_datetime("Dec-07-2025") is None


def test_normalize_glyphs() -> None:
    assert blocks.normalize_glyphs("NYG GIANTS +½") == "NYG GIANTS +0.5"
    assert blocks.normalize_glyphs("Over 44Â½") == "Over 44.5"
    assert blocks.normalize_glyphs("DAL −3¼") == "DAL -3.25"
