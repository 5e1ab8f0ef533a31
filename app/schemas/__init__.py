"""Pydantic schemas package.

Files:
  common.py       — CamelModel base + HealthResponse (dashboard schemas inherit CamelModel)
  maintenance.py  — maintenance request views, workflow bodies and stats
  property.py     — properties and units
  voice_agent.py  — voice-agent config plus the agent-facing tool / transcript bodies
"""
