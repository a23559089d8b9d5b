#!/usr/bin/env python3
"""Tests for Urgency enum."""

from gaadi import Urgency


class TestUrgency:
    """Tests for Urgency enum ordering."""

    def test_urgency_ordering(self):
        """Lower value = more urgent."""
        assert Urgency.URGENT.value < Urgency.SOON.value
        assert Urgency.SOON.value < Urgency.NORMAL.value
