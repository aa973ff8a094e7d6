# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: __init__.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Idempotent Ubuntu host provisioning with per-run failure policy.
# -----------------------------------------------------------------------------
__version__ = "1.0.0"
