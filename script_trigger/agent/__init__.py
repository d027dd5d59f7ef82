"""Node agent — executes scripts on behalf of a remote controller.

agent/
  schemas.py      — wire contract shared with RemoteLauncher
  processes.py    — ProcessTable (running scripts by process id)
  dependencies.py — FastAPI dependency injection + token check
  middleware.py   — request id, access log, error handler
  routes/         — /health, /files, /scripts, /processes
  server.py       — create_app() factory
"""
