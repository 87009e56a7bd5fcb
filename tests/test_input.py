"""Tests for per-mode key bindings."""

from __future__ import annotations

import pytest

from czytam.api.models import LearningMode
from czytam.sessions.input import KEY_BINDINGS, InputAction, action_for_key


class TestKeyBindings:
    @pytest.mark.parametrize("mode", [LearningMode.CARD_SHOW, LearningMode.BOOKLET])
    def test_arrows_step_through_syllables(self, mode):
        assert action_for_key(mode, "ArrowRight") is InputAction.ADVANCE
        assert action_for_key(mode, " ") is InputAction.ADVANCE
        assert action_for_key(mode, "ArrowLeft") is InputAction.RETREAT

    def test_discovery_arrows_turn_pages(self):
        mode = LearningMode.BOOKLET_DISCOVERY
        assert action_for_key(mode, " ") is InputAction.ADVANCE
        assert action_for_key(mode, "ArrowRight") is InputAction.NEXT_PAGE
        assert action_for_key(mode, "ArrowLeft") is InputAction.PREVIOUS_PAGE

    def test_unbound_key(self):
        assert action_for_key(LearningMode.CARD_SHOW, "Enter") is None

    def test_modes_without_bindings(self):
        assert action_for_key(LearningMode.MEMORY, " ") is None
        assert LearningMode.SYLLABLES_IN_MOTION not in KEY_BINDINGS

    def test_mode_given_as_label(self):
        assert action_for_key("Książeczka 2.0 - Odkrywanie", "ArrowRight") is InputAction.NEXT_PAGE
