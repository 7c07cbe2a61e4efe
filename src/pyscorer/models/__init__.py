"""Canonical record models."""

from .records import BattingRecord, GameRecord, PitchingRecord

__all__ = ["GameRecord", "BattingRecord", "PitchingRecord"]
