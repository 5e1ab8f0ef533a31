"""Routers package — HTTP endpoint definitions.

Files:
  voice_agent.py  — Voice-platform routes (/api/voice-agent/webhook, /tools, /transcript-issues)
  v1/             — Versioned dashboard API routes (/api/v1/*)
"""
