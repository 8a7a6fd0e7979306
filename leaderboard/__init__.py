"""Leaderboard service: users, points and ranks over HTTP."""
