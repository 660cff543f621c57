"""Scoring, leaderboard and statistics rules for recorded arithmetic games."""
