"""
WebTools Routes

Route Modules:
- agents: Agent list passthrough to the backend
- tools: Tool processing relay (JSON and file upload)
- catalog: Merged tool catalog with filtering and search
- health: Liveness probe
"""
