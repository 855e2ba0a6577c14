"""Tests for terminal QR rendering."""

import io

from stickerbot.session.qr import TerminalQRRenderer


def test_renders_block_text():
    out = io.StringIO()
    TerminalQRRenderer(out).render("2@Xk1...,base64key==,otherkey==")

    lines = out.getvalue().splitlines()
    assert len(lines) > 10
    # Square-ish: every row has the same width
    assert len({len(line) for line in lines}) == 1


def test_different_challenges_differ():
    first, second = io.StringIO(), io.StringIO()
    TerminalQRRenderer(first).render("challenge-one")
    TerminalQRRenderer(second).render("challenge-two")
    assert first.getvalue() != second.getvalue()
