# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the assignment scheduler.

Domains:
    scheduling: Teacher assignments, conflict detection and statistics.
    directory: Read-only teacher and class lookups.
    auth: Token validation and caller identity.
"""
