#!/usr/bin/env python3
"""
Default values for penpot-deploy.

This module is the single source of truth for names, paths and tunables.
Other modules import from here instead of hardcoding strings.
"""

# ============================================================================
# Upstream source
# ============================================================================

SOURCE_REPO = 'https://github.com/montevive/penpot-mcp.git'
SOURCE_REMOTE = 'origin'
SOURCE_BRANCH = 'main'

# Staging directory (relative to the working tree, always removed by cleanup)
SOURCE_DIR = 'penpot-mcp-source'

# Files never copied from staging into the working tree
STAGING_EXCLUDES = (
    '.git',
    '__pycache__',
    '*.pyc',
    '.pytest_cache',
    '.coverage',
)

# ============================================================================
# Image / service
# ============================================================================

IMAGE_NAME = 'penpot-mcp'
IMAGE_TAG = 'latest'
SERVICE_NAME = 'penpot-mcp'
CONTAINER_NAME = 'penpot-mcp-server'

# ============================================================================
# Operator configuration
# ============================================================================

ENV_FILE = '.env'
ENV_TEMPLATE = '.env.example'

# Keys the operator is asked to fill in after the first bootstrap
ENV_PLACEHOLDER_KEYS = (
    'PENPOT_USERNAME=your_username',
    'PENPOT_PASSWORD=your_password',
)

COMPOSE_FILE = 'docker-compose.yml'
TEMPLATE_SUFFIX = '.j2'

# ============================================================================
# Health
# ============================================================================

HEALTH_URL = 'http://localhost:5000/health'
HEALTH_TIMEOUT_SECONDS = 5.0

# Wait between `up -d` and the single health probe
STARTUP_GRACE_SECONDS = 10.0

# ============================================================================
# Environment variables read by the CLI
# ============================================================================

ENV_PREFIX = 'PENPOT_DEPLOY_'
ENV_LOG_LEVEL = 'PENPOT_DEPLOY_LOG_LEVEL'
ENV_ASSUME_YES = 'PENPOT_DEPLOY_ASSUME_YES'
ENV_NO_COLOR = 'NO_COLOR'

# Table name inside an optional --config TOML file
CONFIG_TABLE = 'deploy'
