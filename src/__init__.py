"""Teacher Assignment Scheduler.

Binds teachers to class, section, subject and weekday slots for the school
administration application, and guarantees no teacher is double-booked.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
