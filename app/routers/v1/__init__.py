"""v1 router package — all /api/v1/* (dashboard) endpoints live here.

Files:
  maintenance_requests.py  — request list / detail / assign / resolve / stats
  voice_agent_config.py    — per-property and workspace-default agent config
  properties.py            — properties and units

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
