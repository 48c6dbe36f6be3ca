"""penpot-deploy: prepare, build and launch the PenPot MCP server stack."""

from __future__ import annotations

import os

__version__ = os.getenv("PENPOT_DEPLOY_BUILD_VERSION", "0.1.0")
