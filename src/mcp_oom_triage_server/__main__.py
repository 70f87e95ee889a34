"""Module entrypoint.

Allows:
    python -m mcp_oom_triage_server
"""

from __future__ import annotations

from mcp_oom_triage_server.server.oom_server import main

if __name__ == "__main__":
    main()
